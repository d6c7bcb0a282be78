"""Request-scoped record selection for one payment channel."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from uuid import UUID

from fechamento_caixa.db.models.pos_record import PaymentChannel


@dataclass(frozen=True, slots=True)
class ChannelSelection:
    """Immutable selection over the eligible records of a channel.

    Every mutation returns a new value; ids outside ``eligible_ids`` are
    never added to the selection.
    """

    channel: PaymentChannel
    eligible_ids: frozenset[UUID]
    selected_ids: frozenset[UUID] = frozenset()

    @classmethod
    def open(
        cls, channel: PaymentChannel, eligible_ids: Iterable[UUID]
    ) -> ChannelSelection:
        return cls(channel=channel, eligible_ids=frozenset(eligible_ids))

    def toggle(self, record_id: UUID) -> ChannelSelection:
        if record_id in self.selected_ids:
            return replace(self, selected_ids=self.selected_ids - {record_id})
        if record_id not in self.eligible_ids:
            return self
        return replace(self, selected_ids=self.selected_ids | {record_id})

    def select_all(self) -> ChannelSelection:
        return replace(self, selected_ids=self.eligible_ids)

    def clear_selection(self) -> ChannelSelection:
        return replace(self, selected_ids=frozenset())

    @property
    def is_empty(self) -> bool:
        return not self.selected_ids
