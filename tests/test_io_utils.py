"""Tests for journal snapshot I/O."""
import json
from unittest.mock import patch

import pytest

from shared.io_utils import atomic_json_write, load_journal_snapshot, safe_json_read


class TestSafeJsonRead:

    def test_reads_file(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({'a': 1}))
        assert safe_json_read(path) == {'a': 1}

    def test_falls_back_to_backup(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json")
        (tmp_path / "data.json.bak").write_text(json.dumps({'b': 2}))
        assert safe_json_read(path) == {'b': 2}

    def test_default_when_missing(self, tmp_path):
        assert safe_json_read(tmp_path / "missing.json", default=[]) == []


class TestLoadJournalSnapshot:

    def test_full_snapshot(self, tmp_path):
        path = tmp_path / "journal.json"
        path.write_text(json.dumps({
            'trades': [{'id': 'a', 'date': '2024-01-01', 'pnl': 5}, 'junk'],
            'portfolios': [{'id': 'main', 'initialCapital': 1000}],
            'activePortfolioIds': ['main'],
        }))
        snapshot = load_journal_snapshot(path)
        assert len(snapshot['trades']) == 1
        assert snapshot['portfolios'][0]['initialCapital'] == 1000
        assert snapshot['activePortfolioIds'] == ['main']

    def test_bare_trade_list(self, tmp_path):
        path = tmp_path / "journal.json"
        path.write_text(json.dumps([{'id': 'a', 'date': '2024-01-01', 'pnl': 5}]))
        snapshot = load_journal_snapshot(path)
        assert len(snapshot['trades']) == 1
        assert snapshot['portfolios'] == []
        assert 'activePortfolioIds' not in snapshot

    def test_missing_file_is_empty(self, tmp_path):
        snapshot = load_journal_snapshot(tmp_path / "nope.json")
        assert snapshot == {'trades': [], 'portfolios': []}


class TestAtomicJsonWrite:

    def test_write_and_backup(self, tmp_path):
        path = tmp_path / "out" / "summary.json"
        atomic_json_write(path, {'v': 1})
        atomic_json_write(path, {'v': 2})

        assert json.loads(path.read_text()) == {'v': 2}
        assert json.loads((tmp_path / "out" / "summary.json.bak").read_text()) == {'v': 1}
        assert not list((tmp_path / "out").glob("*.tmp"))

    def test_failed_write_keeps_previous_file(self, tmp_path):
        path = tmp_path / "summary.json"
        atomic_json_write(path, {'v': 1})

        with patch('shared.io_utils.json.dump', side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                atomic_json_write(path, {'v': 2})

        assert json.loads(path.read_text()) == {'v': 1}
        assert json.loads((tmp_path / "summary.json.bak").read_text()) == {'v': 1}
        assert not list(tmp_path.glob("*.tmp"))
