"""
Quadro Kanban: resolução do alvo de um drop, actualização optimista e falhas de escrita.
"""
import copy

import pytest

from models.lead import DEFAULT_STATUS_CONFIG, PRIORITY_COLUMNS
from services.kanban import KanbanBoard, build_board, get_kanban_columns, resolve_target_group

STATUS_CONFIG = copy.deepcopy(DEFAULT_STATUS_CONFIG)


def sample_leads():
    return [
        {"id": "1", "name": "A", "status": "New", "priority": "High", "updatedAt": "2025-06-01T00:00:00+00:00"},
        {"id": "2", "name": "B", "status": "Sent", "priority": "Mid", "updatedAt": "2025-06-01T00:00:00+00:00"},
        {"id": "3", "name": "C", "status": "Closed", "priority": "Low", "updatedAt": "2025-06-01T00:00:00+00:00"},
    ]


class RecordingWriter:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def __call__(self, lead_id, fields):
        self.calls.append((lead_id, fields))
        if self.error:
            raise self.error


@pytest.fixture
def quiet_error_logger(monkeypatch):
    from services import kanban
    logged = []

    async def log_error(**kwargs):
        logged.append(kwargs)
        return "error-id"

    monkeypatch.setattr(kanban.system_error_logger, "log_error", log_error)
    return logged


class TestColumns:

    def test_status_columns_follow_configured_order(self):
        config = copy.deepcopy(STATUS_CONFIG)
        config[0]["order"] = 99
        columns = get_kanban_columns("status", config)
        assert columns[-1]["id"] == "New"
        assert columns[0]["id"] == "Sent"

    def test_priority_columns(self):
        columns = get_kanban_columns("priority", STATUS_CONFIG)
        assert [c["id"] for c in columns] == [c["id"] for c in PRIORITY_COLUMNS]


class TestResolveTargetGroup:

    def test_column_id(self):
        columns = get_kanban_columns("status", STATUS_CONFIG)
        assert resolve_target_group("Viewed", "status", columns, sample_leads()) == "Viewed"

    def test_card_id_uses_card_group(self):
        columns = get_kanban_columns("status", STATUS_CONFIG)
        assert resolve_target_group("3", "status", columns, sample_leads()) == "Closed"

    def test_card_id_in_priority_mode(self):
        columns = get_kanban_columns("priority", STATUS_CONFIG)
        assert resolve_target_group("2", "priority", columns, sample_leads()) == "Mid"

    def test_status_id_is_not_a_priority_column(self):
        columns = get_kanban_columns("priority", STATUS_CONFIG)
        assert resolve_target_group("Closed", "priority", columns, sample_leads()) is None

    def test_no_target(self):
        columns = get_kanban_columns("status", STATUS_CONFIG)
        assert resolve_target_group(None, "status", columns, sample_leads()) is None
        assert resolve_target_group("unknown", "status", columns, sample_leads()) is None


class TestBuildBoard:

    def test_leads_grouped_by_status(self):
        board = build_board(sample_leads(), "status", STATUS_CONFIG)
        by_id = {c["id"]: [lead["id"] for lead in c["leads"]] for c in board["columns"]}
        assert by_id["New"] == ["1"]
        assert by_id["Sent"] == ["2"]
        assert by_id["Closed"] == ["3"]
        assert by_id["Viewed"] == []
        assert board["totalCount"] == 3

    def test_unconfigured_status_gets_raw_column_at_end(self):
        leads = sample_leads() + [{"id": "4", "status": "Archived", "priority": "Mid"}]
        board = build_board(leads, "status", STATUS_CONFIG)
        last = board["columns"][-1]
        assert last["id"] == "Archived"
        assert last["label"] == "Archived"
        assert last["color"] == "#000000"
        assert [lead["id"] for lead in last["leads"]] == ["4"]

    def test_configured_labels(self):
        board = build_board(sample_leads(), "status", STATUS_CONFIG)
        assert board["columns"][0]["label"] == "新規"


class TestKanbanMove:

    @pytest.mark.asyncio
    async def test_move_to_column(self):
        writer = RecordingWriter()
        board = KanbanBoard(sample_leads(), "status", STATUS_CONFIG, writer=writer)

        changed, data, _ = await board.move("1", "Negotiating")

        assert changed is True
        assert data["oldValue"] == "New"
        assert data["newValue"] == "Negotiating"
        assert data["persisted"] is True
        assert board.find("1")["status"] == "Negotiating"
        assert board.find("1")["updatedAt"] != "2025-06-01T00:00:00+00:00"
        assert len(writer.calls) == 1
        lead_id, fields = writer.calls[0]
        assert lead_id == "1"
        assert set(fields) == {"status", "updatedAt"}

    @pytest.mark.asyncio
    async def test_move_onto_card(self):
        writer = RecordingWriter()
        board = KanbanBoard(sample_leads(), "status", STATUS_CONFIG, writer=writer)

        changed, data, _ = await board.move("1", "3")

        assert changed is True
        assert board.find("1")["status"] == "Closed"

    @pytest.mark.asyncio
    async def test_priority_move_writes_only_priority(self):
        writer = RecordingWriter()
        board = KanbanBoard(sample_leads(), "priority", STATUS_CONFIG, writer=writer)

        await board.move("1", "Low")

        assert board.find("1")["priority"] == "Low"
        assert board.find("1")["status"] == "New"
        assert "status" not in writer.calls[0][1]

    @pytest.mark.asyncio
    async def test_same_group_is_noop(self):
        writer = RecordingWriter()
        board = KanbanBoard(sample_leads(), "status", STATUS_CONFIG, writer=writer)

        changed, _, _ = await board.move("1", "New")

        assert changed is False
        assert writer.calls == []
        assert board.find("1")["updatedAt"] == "2025-06-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_no_target_is_noop(self):
        writer = RecordingWriter()
        board = KanbanBoard(sample_leads(), "status", STATUS_CONFIG, writer=writer)

        changed, _, _ = await board.move("1", None)

        assert changed is False
        assert writer.calls == []

    @pytest.mark.asyncio
    async def test_failed_write_rolls_back(self, quiet_error_logger):
        writer = RecordingWriter(error=RuntimeError("network down"))
        board = KanbanBoard(sample_leads(), "status", STATUS_CONFIG, writer=writer)

        changed, data, _ = await board.move("1", "Closed")

        assert changed is True
        assert data["persisted"] is False
        assert data["rolledBack"] is True
        assert board.find("1")["status"] == "New"
        assert board.find("1")["updatedAt"] == "2025-06-01T00:00:00+00:00"
        assert quiet_error_logger[0]["component"] == "kanban"

    @pytest.mark.asyncio
    async def test_failed_write_without_rollback_keeps_local_state(self, quiet_error_logger):
        writer = RecordingWriter(error=RuntimeError("network down"))
        board = KanbanBoard(sample_leads(), "status", STATUS_CONFIG, writer=writer, rollback_on_failure=False)

        _, data, _ = await board.move("1", "Closed")

        assert data["persisted"] is False
        assert data["rolledBack"] is False
        assert board.find("1")["status"] == "Closed"

    def test_invalid_group_mode(self):
        with pytest.raises(ValueError):
            KanbanBoard(sample_leads(), "agent", STATUS_CONFIG)
