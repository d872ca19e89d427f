# src/Loreweaver/commands/ai_conversation.py
import structlog
from pydantic import Field

from Loreweaver import repos
from Loreweaver.commanding import Option, command
from Loreweaver.db import session_scope
from Loreweaver.schemas import AiConversationRecord, AiMessageRecord, ConversationWithMessages
from Loreweaver.validation import ContextType

log = structlog.get_logger()

# Attempts for an append that lost a message_order race
_APPEND_ATTEMPTS = 3


class ConversationKeyOpts(Option):
    campaign_id: str
    context_type: ContextType = Field(description="Conversation thread, e.g. sidebar|fullpage")


class ConversationIdOpts(Option):
    conversation_id: str


class AddMessageOpts(Option):
    conversation_id: str
    role: str = Field(description="user|assistant|tool")
    content: str
    tool_name: str | None = None
    tool_input_json: str | None = None
    tool_data_json: str | None = None
    proposal_json: str | None = None


class TokenCountsOpts(Option):
    conversation_id: str
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0


@command(
    name="get_or_create_ai_conversation",
    description="Fetch the conversation for a campaign/context, creating it on first use.",
    option_model=ConversationKeyOpts,
)
async def get_or_create_ai_conversation(opts: ConversationKeyOpts):
    async with session_scope() as s:
        conv = await repos.get_or_create_ai_conversation(s, opts.campaign_id, opts.context_type)
        return AiConversationRecord.model_validate(conv)


@command(
    name="load_ai_conversation",
    description="Load a conversation with its messages in order; null if none exists.",
    option_model=ConversationKeyOpts,
)
async def load_ai_conversation(opts: ConversationKeyOpts):
    async with session_scope() as s:
        conv = await repos.find_ai_conversation(s, opts.campaign_id, opts.context_type)
        if conv is None:
            return None
        messages = await repos.list_ai_messages(s, conv.id)
        return ConversationWithMessages(
            conversation=AiConversationRecord.model_validate(conv),
            messages=[AiMessageRecord.model_validate(m) for m in messages],
        )


@command(
    name="add_ai_message",
    description="Append a message; its order is one past the current message count.",
    option_model=AddMessageOpts,
)
async def add_ai_message(opts: AddMessageOpts):
    fields = opts.model_dump(exclude={"conversation_id"})
    for attempt in range(1, _APPEND_ATTEMPTS + 1):
        try:
            async with session_scope() as s:
                msg = await repos.add_ai_message(s, opts.conversation_id, **fields)
                return AiMessageRecord.model_validate(msg)
        except repos.MessageOrderConflict:
            if attempt == _APPEND_ATTEMPTS:
                raise
            log.warning(
                "ai_message.order_conflict",
                conversation_id=opts.conversation_id,
                attempt=attempt,
            )


@command(
    name="update_ai_token_counts",
    description="Add token usage onto the conversation's running totals.",
    option_model=TokenCountsOpts,
)
async def update_ai_token_counts(opts: TokenCountsOpts):
    async with session_scope() as s:
        conv = await repos.update_ai_token_counts(
            s,
            opts.conversation_id,
            input_tokens=opts.input_tokens,
            output_tokens=opts.output_tokens,
            cache_read_tokens=opts.cache_read_tokens,
            cache_creation_tokens=opts.cache_creation_tokens,
        )
        return AiConversationRecord.model_validate(conv)


@command(
    name="clear_ai_conversation",
    description="Delete all messages and reset token totals; true if any message was removed.",
    option_model=ConversationIdOpts,
)
async def clear_ai_conversation(opts: ConversationIdOpts):
    async with session_scope() as s:
        return await repos.clear_ai_conversation(s, opts.conversation_id)
