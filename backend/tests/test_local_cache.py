import logging

import pytest

from schemas.cart import CartLine
from store.guest_storage import JsonFileGuestStorage, MemoryGuestStorage, guest_storage_for
from store.line_ids import LocalLineId, RemoteLineId, parse_line_id, new_local_id
from store.local_cache import LocalCartCache
from store.notifications import LogNotifier, Notifier
from store import projections


class TestLineIds:

    def test_guest_prefix_means_local(self):
        assert parse_line_id("guest_abc") == LocalLineId("abc")
        assert str(LocalLineId("abc")) == "guest_abc"

    def test_everything_else_is_remote(self):
        assert parse_line_id("42") == RemoteLineId("42")
        assert parse_line_id(42) == RemoteLineId("42")
        assert parse_line_id("cuid_guest_x") == RemoteLineId("cuid_guest_x")

    def test_typed_ids_pass_through(self):
        local = new_local_id()
        assert parse_line_id(local) is local
        assert parse_line_id(str(local)) == local


class TestLocalCartCache:

    def test_undo_token_is_a_deep_copy(self, make_snapshot):
        cache = LocalCartCache()
        cache.replace_server([CartLine(id="1", product_id="p1", quantity=3, product=make_snapshot("p1"))])

        token = cache.set_server_quantity(RemoteLineId("1"), 7)
        cache.server[0].quantity = 9
        cache.server[0].product.price = 0.0
        cache.rollback(token)

        assert cache.server[0].quantity == 3
        assert cache.server[0].product.price == 10.0

    def test_rollback_restores_removed_line(self, make_snapshot):
        cache = LocalCartCache()
        lines = [CartLine(id=str(i), product_id=f"p{i}", quantity=i, product=make_snapshot(f"p{i}")) for i in (1, 2)]
        cache.replace_server(lines)

        token = cache.remove_server(RemoteLineId("1"))
        assert [l.id for l in cache.server] == ["2"]
        cache.rollback(token)

        assert [(l.id, l.quantity) for l in cache.server] == [("1", 1), ("2", 2)]

    def test_replace_server_does_not_alias_input(self, make_snapshot):
        cache = LocalCartCache()
        lines = [CartLine(id="1", product_id="p1", quantity=1, product=make_snapshot("p1"))]
        cache.replace_server(lines)
        lines[0].quantity = 5
        assert cache.server[0].quantity == 1

    def test_guest_snapshot_is_copied(self, make_snapshot):
        cache = LocalCartCache()
        product = make_snapshot("p1", price=4.0)
        cache.add_guest("p1", 1, None, None, product)
        product.price = 100.0
        assert projections.cart_total(cache.guest) == 4.0

    def test_guest_changes_are_persisted(self, make_snapshot):
        storage = MemoryGuestStorage()
        cache = LocalCartCache(storage)
        line = cache.add_guest("p1", 2, "M", None, make_snapshot("p1"))
        cache.set_guest_quantity(parse_line_id(line.id), 5)

        reloaded = LocalCartCache(storage)
        assert [(l.product_id, l.size, l.quantity) for l in reloaded.guest] == [("p1", "M", 5)]
        assert reloaded.server == []

        reloaded.remove_guest(parse_line_id(line.id))
        assert LocalCartCache(storage).guest == []


class TestGuestStorage:

    def test_json_file_survives_restart(self, tmp_path, make_snapshot):
        path = tmp_path / "guest" / "cart.json"
        cache = LocalCartCache(JsonFileGuestStorage(path, CartLine))
        cache.add_guest("p1", 2, None, "red", make_snapshot("p1"))
        # The server shadow is never written
        cache.replace_server([CartLine(id="7", product_id="p9", quantity=1)])

        restored = LocalCartCache(JsonFileGuestStorage(path, CartLine))
        assert [(l.product_id, l.color, l.quantity) for l in restored.guest] == [("p1", "red", 2)]
        assert restored.guest[0].id.startswith("guest_")
        assert "p9" not in path.read_text()

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "cart.json"
        path.write_text("{not json")
        assert JsonFileGuestStorage(path, CartLine).load() == []

    def test_missing_file_loads_empty(self, tmp_path):
        assert JsonFileGuestStorage(tmp_path / "absent.json", CartLine).load() == []

    def test_storage_chosen_by_path(self, tmp_path):
        assert isinstance(guest_storage_for(None, CartLine), MemoryGuestStorage)
        assert isinstance(guest_storage_for(str(tmp_path / "c.json"), CartLine), JsonFileGuestStorage)


class TestNotifier:

    def test_emit_must_be_implemented(self):
        class Silent(Notifier):
            pass

        with pytest.raises(TypeError):
            Silent()

    def test_log_notifier_writes_warning_for_errors(self, caplog):
        with caplog.at_level(logging.INFO, logger="store.notifications"):
            LogNotifier().error("Failed to add")
            LogNotifier().success("Cart synced!")

        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.WARNING, "[error] Failed to add"),
            (logging.INFO, "[success] Cart synced!"),
        ]
