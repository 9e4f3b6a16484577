"""Chat policy providers and FastAPI dependency aliases."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from infrastructure.services import get_document_store, get_user_directory
from modules.chat.counters import DailyMessageCounter
from modules.chat.policy import ChatPolicyEvaluator
from modules.chat.settings_store import ChatSettingsStore


@lru_cache
def get_chat_settings_store() -> ChatSettingsStore:
    return ChatSettingsStore(get_document_store())


@lru_cache
def get_daily_message_counter() -> DailyMessageCounter:
    return DailyMessageCounter(get_document_store())


@lru_cache
def get_chat_policy_evaluator() -> ChatPolicyEvaluator:
    return ChatPolicyEvaluator(
        settings=get_chat_settings_store(),
        counters=get_daily_message_counter(),
        directory=get_user_directory(),
    )


ChatSettingsStoreDep = Annotated[ChatSettingsStore, Depends(get_chat_settings_store)]
ChatPolicyEvaluatorDep = Annotated[
    ChatPolicyEvaluator, Depends(get_chat_policy_evaluator)
]
