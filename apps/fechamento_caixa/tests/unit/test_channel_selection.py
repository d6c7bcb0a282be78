from __future__ import annotations

from uuid import uuid4

from fechamento_caixa.db.models.pos_record import PaymentChannel
from fechamento_caixa.domain.channel_selection import ChannelSelection


def test_toggle_adds_and_removes_eligible_ids() -> None:
    first, second = uuid4(), uuid4()
    selection = ChannelSelection.open(PaymentChannel.CASH, [first, second])

    selected = selection.toggle(first)
    assert selected.selected_ids == frozenset({first})

    unselected = selected.toggle(first)
    assert unselected.selected_ids == frozenset()
    assert unselected.is_empty


def test_toggle_ignores_ineligible_ids() -> None:
    eligible = uuid4()
    selection = ChannelSelection.open(PaymentChannel.PIX, [eligible])

    assert selection.toggle(uuid4()) == selection


def test_select_all_and_clear_selection() -> None:
    ids = [uuid4(), uuid4(), uuid4()]
    selection = ChannelSelection.open(PaymentChannel.CARD, ids)

    everything = selection.select_all()
    assert everything.selected_ids == frozenset(ids)
    assert everything.channel == PaymentChannel.CARD

    cleared = everything.clear_selection()
    assert cleared.is_empty
    assert cleared.eligible_ids == frozenset(ids)
