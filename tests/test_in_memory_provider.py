import pytest

from baton import Message
from baton.memory import Err, InMemoryProvider, Ok


def _messages(*contents: str) -> list[Message]:
    return [Message.user(content) for content in contents]


@pytest.mark.asyncio
async def test_store_and_get_adds_bookkeeping_metadata() -> None:
    provider = InMemoryProvider()

    await provider.store_messages("conv", _messages("a", "b"), {"user_id": "u-1"})
    result = await provider.get_conversation("conv")

    assert isinstance(result, Ok)
    assert [message.content for message in result.value.messages] == ["a", "b"]
    metadata = result.value.metadata
    assert metadata["user_id"] == "u-1"
    assert metadata["total_messages"] == 2
    assert {"created_at", "updated_at"} <= metadata.keys()


@pytest.mark.asyncio
async def test_store_replaces_history_and_keeps_created_at() -> None:
    provider = InMemoryProvider()

    await provider.store_messages("conv", _messages("a"))
    first = await provider.get_conversation("conv")
    await provider.store_messages("conv", _messages("b", "c"))
    second = await provider.get_conversation("conv")

    assert [message.content for message in second.value.messages] == ["b", "c"]
    assert second.value.metadata["created_at"] == first.value.metadata["created_at"]


@pytest.mark.asyncio
async def test_messages_are_truncated_to_most_recent() -> None:
    provider = InMemoryProvider(max_messages_per_conversation=2)

    await provider.store_messages("conv", _messages("a", "b", "c"))
    await provider.append_messages("conv", _messages("d"))
    result = await provider.get_conversation("conv")

    assert [message.content for message in result.value.messages] == ["c", "d"]


@pytest.mark.asyncio
async def test_oldest_conversation_is_evicted() -> None:
    provider = InMemoryProvider(max_conversations=2)

    await provider.store_messages("one", _messages("1"))
    await provider.store_messages("two", _messages("2"))
    await provider.append_messages("one", _messages("1b"))
    await provider.store_messages("three", _messages("3"))

    assert await provider.get_conversation("two") == Ok(None)
    assert (await provider.get_conversation("one")).value is not None
    assert (await provider.get_conversation("three")).value is not None


@pytest.mark.asyncio
async def test_append_to_unknown_conversation_fails() -> None:
    provider = InMemoryProvider()

    result = await provider.append_messages("ghost", _messages("x"))

    assert isinstance(result, Err)
    assert result.error.message == "Conversation not found: ghost"
    assert result.error.provider == "memory"


@pytest.mark.asyncio
async def test_delete_and_clear_user() -> None:
    provider = InMemoryProvider()
    await provider.store_messages("a", _messages("x"), {"user_id": "u-1"})
    await provider.store_messages("b", _messages("y"), {"user_id": "u-1"})
    await provider.store_messages("c", _messages("z"), {"user_id": "u-2"})

    assert await provider.delete_conversation("a") == Ok(True)
    assert await provider.delete_conversation("a") == Ok(False)
    assert await provider.clear_user_conversations("u-1") == Ok(1)
    assert (await provider.health_check()).value["conversations"] == 1

    await provider.close()
    assert (await provider.health_check()).value["conversations"] == 0
