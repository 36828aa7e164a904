"""Unit tests for SessionLedger."""

import pytest
from dataclasses import FrozenInstanceError

from capdesk.models.session import SessionStatus
from capdesk.services.session_ledger import SessionLedger


@pytest.mark.unit
class TestSessionLedger:
    """Test cases for SessionLedger."""

    def test_create_prepends_recording_record(self, ledger):
        first = ledger.create()
        second = ledger.create(file_path="/tmp/hint.wav")

        records = ledger.list()
        assert [r.record_id for r in records] == [second.record_id, first.record_id]
        assert first.status is SessionStatus.RECORDING
        assert first.file_path is None
        assert second.file_path == "/tmp/hint.wav"
        assert ledger.latest() == second
        assert len(ledger) == 2

    def test_create_treats_empty_hint_as_absent(self, ledger):
        record = ledger.create(file_path="")
        assert record.file_path is None

    def test_record_ids_are_unique(self, ledger):
        ids = {ledger.create().record_id for _ in range(200)}
        assert len(ids) == 200

    def test_finalize_marks_done_with_file(self, ledger):
        record = ledger.create()

        updated = ledger.finalize(record.record_id, "/tmp/a.wav", process_handle=4242)

        assert updated.status is SessionStatus.DONE
        assert updated.file_path == "/tmp/a.wav"
        assert updated.process_handle == 4242
        assert updated.record_id == record.record_id
        assert updated.started_at == record.started_at
        assert ledger.get(record.record_id) == updated

    def test_finalize_without_file_keeps_existing_path(self, ledger):
        record = ledger.create(file_path="/tmp/hint.wav")

        ledger.finalize(record.record_id)
        assert ledger.get(record.record_id).file_path == "/tmp/hint.wav"

        ledger.finalize(record.record_id, "")
        assert ledger.get(record.record_id).file_path == "/tmp/hint.wav"

        ledger.finalize(record.record_id, "/tmp/final.wav")
        assert ledger.get(record.record_id).file_path == "/tmp/final.wav"

    def test_finalize_unknown_id_is_noop(self, ledger):
        record = ledger.create()
        events = []
        ledger.subscribe(events.append)

        assert ledger.finalize("does-not-exist", "/tmp/x.wav") is None
        assert events == []
        assert ledger.get(record.record_id).status is SessionStatus.RECORDING

    def test_list_returns_snapshot(self, ledger):
        record = ledger.create()
        snapshot = ledger.list()

        ledger.finalize(record.record_id, "/tmp/a.wav")
        ledger.create()

        assert len(snapshot) == 1
        assert snapshot[0].status is SessionStatus.RECORDING
        snapshot.clear()
        assert len(ledger.list()) == 2

    def test_records_are_immutable(self, ledger):
        record = ledger.create()
        with pytest.raises(FrozenInstanceError):
            record.status = SessionStatus.DONE

    def test_latest_and_active_on_empty_ledger(self, ledger):
        assert ledger.latest() is None
        assert ledger.active() is None
        assert ledger.list() == []

    def test_active_returns_recording_record(self, ledger):
        done = ledger.create()
        ledger.finalize(done.record_id)
        pending = ledger.create()

        assert ledger.active().record_id == pending.record_id

    def test_subscribers_receive_events(self, ledger):
        events = []
        ledger.subscribe(events.append)

        record = ledger.create()
        ledger.finalize(record.record_id, "/tmp/a.wav")

        assert [e.event_type for e in events] == ["created", "finalized"]
        assert events[1].record.file_path == "/tmp/a.wav"

    def test_observer_sees_post_mutation_state(self, ledger):
        seen = []

        def on_change(event):
            seen.append([(r.record_id, r.status) for r in ledger.list()])

        ledger.subscribe(on_change)
        record = ledger.create()
        ledger.finalize(record.record_id)

        assert seen[0] == [(record.record_id, SessionStatus.RECORDING)]
        assert seen[1] == [(record.record_id, SessionStatus.DONE)]

    def test_unsubscribe_only_removes_one_observer(self, ledger):
        first, second = [], []
        unsubscribe_first = ledger.subscribe(first.append)
        ledger.subscribe(second.append)

        ledger.create()
        unsubscribe_first()
        ledger.create()

        assert len(first) == 1
        assert len(second) == 2

    def test_unsubscribe_twice_is_harmless(self, ledger):
        events = []
        unsubscribe = ledger.subscribe(events.append)
        unsubscribe()
        unsubscribe()

        ledger.create()
        assert events == []

    def test_same_callback_subscribed_twice_is_independent(self, ledger):
        events = []
        unsubscribe_a = ledger.subscribe(events.append)
        ledger.subscribe(events.append)

        ledger.create()
        assert len(events) == 2

        unsubscribe_a()
        ledger.create()
        assert len(events) == 3

    def test_failing_observer_does_not_break_mutation(self, ledger):
        events = []

        def broken(event):
            raise RuntimeError("observer bug")

        ledger.subscribe(broken)
        ledger.subscribe(events.append)

        record = ledger.create()

        assert ledger.get(record.record_id) is not None
        assert len(events) == 1

    def test_ledgers_do_not_share_observers(self):
        first_ledger, second_ledger = SessionLedger(), SessionLedger()
        events = []
        first_ledger.subscribe(events.append)

        second_ledger.create()
        assert events == []
