"""Chat policy evaluator: may one role message another right now?

Checks run in a fixed order and the first failing check is the reported
reason:

1. a policy cell exists for the role pair
2. chat is enabled for the pair
3. the requested direction (initiate or respond) is allowed
4. the learner is enrolled, when the cell requires it
5. the learner reached the lesson threshold
6. the daily message limit of the role pair is not reached, nor the
   per-user daily chat cap for initiations
7. the request falls inside the availability windows, when enforced
8. allow; an allowed initiation consumes one unit of each counter
"""

import datetime as dt
from typing import Callable, List, Optional

import pytz

from infrastructure.identity import UserDirectory
from infrastructure.logging import get_module_logger
from modules.chat.counters import (
    DailyMessageCounter,
    counter_key,
    sender_counter_key,
)
from modules.chat.domain import (
    ChatAvailabilitySettings,
    DenialReason,
    Direction,
    PolicyContext,
    PolicyDecision,
    TimeWindow,
)
from modules.chat.settings_store import ChatSettingsStore

logger = get_module_logger()

LEARNER_ROLE = "learner"
CREATOR_ROLE = "creator"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ChatPolicyEvaluator:
    def __init__(
        self,
        settings: ChatSettingsStore,
        counters: DailyMessageCounter,
        directory: UserDirectory,
        clock: Callable[[], dt.datetime] = _utcnow,
    ):
        self._settings = settings
        self._counters = counters
        self._directory = directory
        self._clock = clock

    def can_initiate(
        self, from_role: str, to_role: str, context: Optional[PolicyContext] = None
    ) -> PolicyDecision:
        return self.evaluate(from_role, to_role, Direction.INITIATE, context)

    def can_respond(
        self, from_role: str, to_role: str, context: Optional[PolicyContext] = None
    ) -> PolicyDecision:
        """Whether ``from_role`` may reply in an existing conversation with ``to_role``."""
        return self.evaluate(from_role, to_role, Direction.RESPOND, context)

    def evaluate(
        self,
        from_role: str,
        to_role: str,
        direction: Direction,
        context: Optional[PolicyContext] = None,
    ) -> PolicyDecision:
        context = context or PolicyContext()
        notes = [
            r.description or r.type
            for r in self._settings.get_restrictions().active_for(from_role)
        ]

        def decide(
            reason: Optional[DenialReason],
            messages_today: Optional[int] = None,
            daily_limit: Optional[int] = None,
        ) -> PolicyDecision:
            decision = PolicyDecision(
                allowed=reason is None,
                reason=reason,
                from_role=from_role,
                to_role=to_role,
                direction=direction,
                messages_today=messages_today,
                daily_limit=daily_limit,
                notes=notes,
            )
            if decision.allowed:
                logger.debug("chat_policy_allowed", **decision.to_log())
            else:
                logger.info("chat_policy_denied", **decision.to_log())
            return decision

        cell = self._settings.get_permissions().cell(from_role, to_role)
        if cell is None:
            return decide(DenialReason.NO_POLICY_DEFINED)
        if not cell.can_chat:
            return decide(DenialReason.CHAT_DISABLED_FOR_ROLE_PAIR)
        if not cell.allows(direction):
            return decide(DenialReason.DIRECTION_NOT_ALLOWED)

        learner_id = self._learner_id(from_role, to_role, context)
        creator_id = self._creator_id(from_role, to_role, context)
        if cell.requires_course_enrollment and not self._enrolled(
            learner_id, creator_id, context
        ):
            return decide(DenialReason.ENROLLMENT_REQUIRED)
        if cell.lesson_threshold and (
            self._completed_lessons(learner_id, creator_id, context)
            < cell.lesson_threshold
        ):
            return decide(DenialReason.LESSON_THRESHOLD_NOT_MET)

        availability = self._settings.get_availability()
        moment = self._local_time(context, availability)
        day = moment.date()
        limit = cell.daily_limit
        key = counter_key(from_role, to_role, day)
        sent_today = self._counters.current(key) if limit else None
        if limit and sent_today >= limit:
            return decide(DenialReason.DAILY_LIMIT_EXCEEDED, sent_today, limit)

        sender_cap = self._sender_cap(direction, context, availability)
        sender_key = sender_counter_key(context.from_user_id, day) if sender_cap else None
        if sender_cap:
            chats_today = self._counters.current(sender_key)
            if chats_today >= sender_cap:
                return decide(DenialReason.DAILY_LIMIT_EXCEEDED, chats_today, sender_cap)

        if availability.enforce_availability and not self._available(
            to_role, moment, availability
        ):
            return decide(DenialReason.OUTSIDE_AVAILABILITY_WINDOW, sent_today, limit)

        if direction == Direction.INITIATE and context.consume:
            if sender_cap and self._counters.consume(sender_key, sender_cap, day) is None:
                return decide(DenialReason.DAILY_LIMIT_EXCEEDED, sender_cap, sender_cap)
            if limit:
                consumed = self._counters.consume(key, limit, day)
                if consumed is None:
                    if sender_cap:
                        self._counters.release(sender_key)
                    return decide(DenialReason.DAILY_LIMIT_EXCEEDED, limit, limit)
                sent_today = consumed
        return decide(None, sent_today, limit)

    @staticmethod
    def _sender_cap(
        direction: Direction,
        context: PolicyContext,
        availability: ChatAvailabilitySettings,
    ) -> int:
        """Per-user daily chat cap for this request, 0 when it does not apply."""
        if direction != Direction.INITIATE or not context.from_user_id:
            return 0
        return availability.max_daily_chats

    def _learner_id(
        self, from_role: str, to_role: str, context: PolicyContext
    ) -> Optional[str]:
        if context.learner_id:
            return context.learner_id
        if from_role == LEARNER_ROLE:
            return context.from_user_id
        if to_role == LEARNER_ROLE:
            return context.to_user_id
        return None

    def _creator_id(
        self, from_role: str, to_role: str, context: PolicyContext
    ) -> Optional[str]:
        if context.creator_id:
            return context.creator_id
        if from_role == CREATOR_ROLE:
            return context.from_user_id
        if to_role == CREATOR_ROLE:
            return context.to_user_id
        return None

    def _enrolled(
        self,
        learner_id: Optional[str],
        creator_id: Optional[str],
        context: PolicyContext,
    ) -> bool:
        if context.enrolled is not None:
            return context.enrolled
        if learner_id is None:
            return False
        return self._directory.is_enrolled(
            learner_id, course_id=context.course_id, creator_id=creator_id
        )

    def _completed_lessons(
        self,
        learner_id: Optional[str],
        creator_id: Optional[str],
        context: PolicyContext,
    ) -> int:
        if context.completed_lessons is not None:
            return context.completed_lessons
        if learner_id is None:
            return 0
        return self._directory.completed_lessons(
            learner_id, course_id=context.course_id, creator_id=creator_id
        )

    def _local_time(
        self, context: PolicyContext, availability: ChatAvailabilitySettings
    ) -> dt.datetime:
        moment = context.at or self._clock()
        if moment.tzinfo is None:
            moment = pytz.utc.localize(moment)
        return moment.astimezone(pytz.timezone(availability.timezone))

    @staticmethod
    def _available(
        to_role: str, moment: dt.datetime, availability: ChatAvailabilitySettings
    ) -> bool:
        """Inside the global window and inside the target role's hours, if any."""
        current = moment.timetz()
        windows: List[TimeWindow] = [availability.global_chat_window]
        role_hours = availability.hours_for(to_role)
        if role_hours is not None:
            windows.append(role_hours)
        return all(window.contains(current) for window in windows)
