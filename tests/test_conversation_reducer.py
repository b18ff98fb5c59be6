"""
Comprehensive behavioral tests for ConversationReducer.

Tests exercise whole conversations end to end through the reducer, the turn
builder and the image materializer, with an in-memory asset store.
"""

import pytest

from chat_request.application.conversation_reducer import (
    ConversationReducer,
    conversation_messages_to_generate_request,
)
from chat_request.domain.entities import (
    GenerationRequest,
    InlineImagePart,
    MetaReplyToPart,
    SystemInstruction,
    Turn,
    TurnRole,
)
from chat_request.domain.exceptions import (
    ImageAssetNotFoundError,
    UnsupportedImageReferenceError,
)
from chat_request.domain.fragments import ContentFragment, ImageRefPart, Message, TextPart, UrlDataRef
from tests.helpers import (
    FakeResizer,
    assistant_message,
    doc,
    error,
    image_ref,
    system_message,
    text,
    tool_call,
    tool_response,
    user_message,
)


@pytest.fixture
def reducer(turn_builder, events) -> ConversationReducer:
    return ConversationReducer(turn_builder, events=events)


@pytest.mark.asyncio
class TestSystemPreamble:
    """Behavioral tests for the leading system message."""

    async def test_no_system_message_means_no_preamble(self, reducer):
        """Test that turns equal the user+assistant message count without a system message."""
        request = await reducer.reduce(
            [user_message(text("hi")), assistant_message(text("hello")), user_message(text("bye"))]
        )

        assert request.system_message is None
        assert [t.role for t in request.chat_sequence] == [TurnRole.USER, TurnRole.MODEL, TurnRole.USER]

    async def test_leading_system_message_becomes_preamble(self, reducer):
        request = await reducer.reduce(
            [system_message(text("You are terse."), text("Answer in French.")), user_message(text("hi"))]
        )

        assert request.system_message == SystemInstruction(parts=(TextPart("You are terse."), TextPart("Answer in French.")))
        assert len(request.chat_sequence) == 1

    async def test_non_text_system_fragments_are_dropped(self, reducer, events):
        """Test that only text content fragments populate the preamble."""
        request = await reducer.reduce(
            [system_message(text("rule 1"), doc("attached"), image_ref("img"), text("rule 2"))]
        )

        assert request.system_message.parts == (TextPart("rule 1"), TextPart("rule 2"))
        dropped = events.of_type("fragment_dropped")
        assert [e["role"] for e in dropped] == ["system", "system"]
        assert [e["fragment_type"] for e in dropped] == ["attachment", "content"]

    async def test_system_message_without_text_gives_empty_preamble(self, reducer):
        request = await reducer.reduce([system_message(doc("only an attachment"))])
        assert request.system_message == SystemInstruction(parts=())
        assert request.chat_sequence == ()

    async def test_later_system_message_is_dropped(self, reducer, events):
        """Test that a system message after position 0 is dropped, not promoted."""
        request = await reducer.reduce([user_message(text("hi")), system_message(text("late rule"))])

        assert request.system_message is None
        assert len(request.chat_sequence) == 1
        [event] = events.of_type("message_dropped")
        assert event["role"] == "system"
        assert event["index"] == 1


@pytest.mark.asyncio
class TestTurnSequence:
    """Behavioral tests for turn order and roles."""

    async def test_turn_order_mirrors_message_order(self, reducer):
        messages = [
            system_message(text("sys")),
            user_message(text("u1")),
            assistant_message(text("a1")),
            user_message(text("u2")),
            assistant_message(text("a2")),
        ]

        request = await reducer.reduce(messages)

        assert [(t.role, t.parts[0].text) for t in request.chat_sequence] == [
            (TurnRole.USER, "u1"),
            (TurnRole.MODEL, "a1"),
            (TurnRole.USER, "u2"),
            (TurnRole.MODEL, "a2"),
        ]

    async def test_unknown_roles_are_dropped(self, reducer, events):
        """Test that messages with unrecognized roles are skipped with a diagnostic."""
        messages = [
            user_message(text("u1")),
            Message(role="tool", fragments=(text("result"),), id="m-tool"),
            assistant_message(text("a1")),
        ]

        request = await reducer.reduce(messages)

        assert [t.role for t in request.chat_sequence] == [TurnRole.USER, TurnRole.MODEL]
        [event] = events.of_type("message_dropped")
        assert event["message_id"] == "m-tool"
        assert event["role"] == "tool"

    async def test_empty_conversation(self, reducer):
        assert await reducer.reduce([]) == GenerationRequest()

    async def test_assistant_error_scenario(self, reducer):
        """Test that an assistant error part becomes a single [ERROR] text part."""
        request = await reducer.reduce([assistant_message(error("timeout"))])

        assert request.chat_sequence == (Turn(role=TurnRole.MODEL, parts=(TextPart("[ERROR] timeout"),)),)

    async def test_assistant_tool_response_scenario(self, reducer, events):
        """Test that an assistant tool response yields an empty model turn."""
        request = await reducer.reduce([assistant_message(tool_response())])

        assert request.chat_sequence == (Turn(role=TurnRole.MODEL, parts=()),)
        assert len(events.of_type("fragment_dropped")) == 1
        assert len(events.of_type("conversion_completed")) == 1

    async def test_tool_call_round_trip(self, reducer):
        call = tool_call("c1", "search", '{"q": "weather"}')
        request = await reducer.reduce(
            [user_message(text("weather?")), assistant_message(call), user_message(tool_response("c1"))]
        )

        assert request.chat_sequence[1].parts == (call.part,)
        assert request.chat_sequence[2].parts == ()


@pytest.mark.asyncio
class TestReplyTo:
    """Behavioral tests for reply-to metadata."""

    async def test_reply_to_part_is_last(self, reducer, asset_store):
        """Test that the reply-to part follows every other part of the user turn."""
        asset_store.add_image("AAA", "image/png", asset_id="i1")
        request = await reducer.reduce(
            [user_message(text("what about"), image_ref("i1"), doc("body"), reply_to="the earlier claim")]
        )

        parts = request.chat_sequence[0].parts
        assert len(parts) == 4
        assert parts[-1] == MetaReplyToPart(reply_to="the earlier claim")

    async def test_reply_to_on_empty_turn(self, reducer):
        request = await reducer.reduce([user_message(reply_to="X")])
        assert request.chat_sequence[0].parts == (MetaReplyToPart(reply_to="X"),)

    async def test_empty_reply_to_is_ignored(self, reducer):
        request = await reducer.reduce([user_message(text("hi"), reply_to="")])
        assert request.chat_sequence[0].parts == (TextPart("hi"),)


@pytest.mark.asyncio
class TestImages:
    """Behavioral tests for images inside conversations."""

    async def test_unsupported_reference_aborts_conversion(self, reducer, events):
        """Test that a non-dblob image reference fails the whole conversion."""
        fragment = ContentFragment(part=ImageRefPart(data_ref=UrlDataRef(url="https://example.com/a.png")))

        with pytest.raises(UnsupportedImageReferenceError):
            await reducer.reduce([user_message(text("look"), fragment)])

        [event] = events.of_type("conversion_failed")
        assert event["error_type"] == "UnsupportedImageReferenceError"
        assert events.of_type("conversion_completed") == []

    async def test_missing_asset_aborts_conversion(self, reducer):
        with pytest.raises(ImageAssetNotFoundError):
            await reducer.reduce([user_message(text("ok")), assistant_message(image_ref("gone"))])

    async def test_failing_resizer_keeps_original_image(self, asset_store):
        """Test that a failing resize collaborator never fails the conversion."""
        asset_store.add_image("AAA", "image/png", asset_id="i1")

        request = await conversation_messages_to_generate_request(
            [user_message(image_ref("i1")), assistant_message(image_ref("i1"))],
            asset_store=asset_store,
            resizer=FakeResizer(fail=True),
        )

        expected = InlineImagePart(mime_type="image/png", base64="AAA")
        assert request.chat_sequence[0].parts == (expected,)
        assert request.chat_sequence[1].parts == (expected,)

    async def test_lookups_follow_fragment_order(self, reducer, asset_store):
        """Test that asset lookups happen sequentially in fragment order."""
        for asset_id in ("a", "b", "c"):
            asset_store.add_image(asset_id.upper(), "image/png", asset_id=asset_id)

        request = await reducer.reduce(
            [user_message(image_ref("b"), image_ref("a")), assistant_message(image_ref("c"))]
        )

        assert asset_store.lookups == ["b", "a", "c"]
        assert [p.base64 for p in request.chat_sequence[0].parts] == ["B", "A"]


@pytest.mark.asyncio
class TestDeterminism:
    """Behavioral tests for repeatable conversions."""

    async def test_conversion_is_idempotent(self, reducer, asset_store):
        asset_store.add_image("AAA", "image/png", asset_id="i1")
        messages = [
            system_message(text("sys")),
            user_message(text("hi"), image_ref("i1"), reply_to="quote"),
            assistant_message(text("hello"), error("partial"), tool_call()),
        ]

        first = await reducer.reduce(messages)
        second = await reducer.reduce(messages)

        assert first == second

    async def test_completion_event_summarizes_request(self, reducer, events):
        await reducer.reduce([system_message(text("s")), user_message(text("u")), assistant_message(text("a"))])

        [event] = events.of_type("conversion_completed")
        assert event["message_count"] == 3
        assert event["turn_count"] == 2
        assert event["has_system_message"] is True
        assert event["latency_ms"] >= 0
