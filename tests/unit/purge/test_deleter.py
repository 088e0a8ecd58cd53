"""Tests for the asset deletion pipeline."""

from __future__ import annotations

import json
import sqlite3
from unittest.mock import MagicMock, patch

import pytest

from reclaim.db.models import Asset, AssetKind, Chunk, Message
from reclaim.errors import ScrubFailed
from reclaim.index.sqlite_vec import SqliteVecIndex
from reclaim.purge.deleter import AssetDeleter
from reclaim.purge.results import BatchStatus
from reclaim.purge.scrubber import ReferenceScrubber


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _add_document(repo, asset_id="doc-1", *, owner="user-1", chat_id=None, chunks=3, name=None):
    asset = Asset(
        id=asset_id,
        kind=AssetKind.DOCUMENT,
        owner_id=owner,
        file_name=name or f"{asset_id}.pdf",
        file_url=f"https://files.example/{asset_id}/key-{asset_id}.pdf",
        file_key=f"key-{asset_id}",
        chat_id=chat_id,
    )
    repo.add_asset(asset)
    repo.add_chunks(
        AssetKind.DOCUMENT,
        [
            Chunk(
                id=f"{asset_id}-c{i}",
                document_id=asset_id,
                chunk_index=i,
                vector_id=f"{asset_id}-v{i}",
                text=f"chunk {i}",
            )
            for i in range(chunks)
        ],
    )
    return asset


def _add_library(repo, asset_id="lib-1", chunks=2):
    asset = Asset(id=asset_id, kind=AssetKind.LIBRARY, owner_id="admin", file_name=f"{asset_id}.pdf")
    repo.add_asset(asset)
    repo.add_chunks(
        AssetKind.LIBRARY,
        [
            Chunk(
                id=f"{asset_id}-c{i}",
                document_id=asset_id,
                chunk_index=i,
                vector_id=f"{asset_id}-v{i}",
                text="x",
            )
            for i in range(chunks)
        ],
    )
    return asset


def _add_image(repo, asset_id="img-1", *, owner="user-1", chat_id=None):
    asset = Asset(
        id=asset_id,
        kind=AssetKind.IMAGE,
        owner_id=owner,
        file_name=f"{asset_id}.png",
        file_url=f"https://files.example/{asset_id}.png",
        chat_id=chat_id,
    )
    repo.add_asset(asset)
    return asset


def _file_part(asset):
    return {"type": "file", "url": asset.file_url, "filename": asset.file_name}


# ---------------------------------------------------------------------------
# Single asset
# ---------------------------------------------------------------------------


def test_delete_removes_vectors_and_metadata(repo, make_index):
    _add_document(repo, chunks=3)
    index = make_index()
    outcome = AssetDeleter(repo, index).delete_asset("doc-1")

    assert outcome.success
    assert outcome.error is None
    assert outcome.vectors_deleted == 3
    assert index.deleted_ids == ["doc-1-v0", "doc-1-v1", "doc-1-v2"]
    assert repo.get_asset("doc-1") is None
    assert repo.count_all_chunks() == 0


def test_second_delete_is_not_found_without_index_call(repo, make_index):
    _add_document(repo)
    index = make_index()
    deleter = AssetDeleter(repo, index)
    assert deleter.delete_asset("doc-1").success
    calls_after_first = len(index.calls)

    again = deleter.delete_asset("doc-1")
    assert not again.success
    assert again.error_code == "not_found"
    assert len(index.calls) == calls_after_first


def test_wrong_owner_is_forbidden_and_touches_nothing(repo, make_index):
    _add_document(repo, owner="user-1")
    index = make_index()
    outcome = AssetDeleter(repo, index).delete_asset("doc-1", owner_id="intruder")

    assert outcome.error_code == "forbidden"
    assert index.calls == []
    assert repo.get_asset("doc-1") is not None


def test_matching_owner_allowed(repo, make_index):
    _add_document(repo, owner="user-1")
    assert AssetDeleter(repo, make_index()).delete_asset("doc-1", owner_id="user-1").success


def test_1200_chunks_deleted_in_three_batches(repo, make_index):
    _add_document(repo, chunks=1200)
    index = make_index()
    outcome = AssetDeleter(repo, index).delete_asset("doc-1")
    assert outcome.success
    assert [len(c) for c in index.calls] == [500, 500, 200]


def test_index_failure_aborts_before_metadata(repo, make_index):
    _add_document(repo, chunks=1200)
    index = make_index(fail_on_call=2)
    scrubber = MagicMock()
    outcome = AssetDeleter(repo, index, scrubber=scrubber).delete_asset("doc-1")

    assert not outcome.success
    assert outcome.error_code == "index_delete_failed"
    assert len(index.calls) == 2
    scrubber.scrub.assert_not_called()
    assert repo.get_asset("doc-1") is not None
    assert repo.count_all_chunks() == 1200


def test_retry_after_index_failure_converges(repo, make_index):
    _add_document(repo, chunks=1200)
    AssetDeleter(repo, make_index(fail_on_call=2)).delete_asset("doc-1")
    outcome = AssetDeleter(repo, make_index()).delete_asset("doc-1")
    assert outcome.success
    assert repo.get_asset("doc-1") is None


def test_steps_run_in_order(repo, make_index):
    repo.add_chat("chat-1", "user-1")
    asset = _add_document(repo, chat_id="chat-1")
    order = []

    index = make_index()
    real_delete_many = index.delete_many
    scrubber = MagicMock()
    scrubber.scrub.side_effect = lambda *a: order.append("references") or 0
    real_chunks = repo.delete_chunks
    real_row = repo.delete_asset_row

    def delete_many(ids):
        order.append("vectors")
        return real_delete_many(ids)

    def delete_chunks(a):
        order.append("chunks")
        return real_chunks(a)

    def delete_asset_row(a):
        order.append("asset")
        return real_row(a)

    with patch.object(index, "delete_many", side_effect=delete_many), patch.object(
        repo, "delete_chunks", side_effect=delete_chunks
    ), patch.object(repo, "delete_asset_row", side_effect=delete_asset_row):
        outcome = AssetDeleter(repo, index, scrubber=scrubber).delete_asset(asset.id)

    assert outcome.success
    assert order == ["vectors", "references", "chunks", "asset"]


def test_pipeline_names():
    deleter = AssetDeleter(MagicMock(), MagicMock())
    assert [name for name, _ in deleter.pipeline()] == ["vectors", "references", "metadata"]


# ---------------------------------------------------------------------------
# Reference scrubbing
# ---------------------------------------------------------------------------


def test_delete_scrubs_owning_chat(repo, make_index):
    repo.add_chat("chat-1", "user-1")
    asset = _add_document(repo, chat_id="chat-1")
    text = {"type": "text", "text": "see attached"}
    repo.add_message(Message(id="m1", chat_id="chat-1", role="user", parts=[text, _file_part(asset)]))

    outcome = AssetDeleter(repo, make_index()).delete_asset("doc-1")

    assert outcome.success
    assert outcome.messages_scrubbed == 1
    assert json.loads(repo.get_message_parts_raw("m1")) == [text]


def test_image_delete_scrubs_by_url(repo, make_index):
    repo.add_chat("chat-1", "user-1")
    image = _add_image(repo, chat_id="chat-1")
    repo.add_message(
        Message(id="m1", chat_id="chat-1", role="user", parts=[{"type": "file", "url": image.file_url}])
    )
    index = make_index()
    outcome = AssetDeleter(repo, index).delete_asset("img-1")

    assert outcome.success
    assert index.calls == []
    assert outcome.messages_scrubbed == 1
    assert repo.get_asset("img-1") is None


def test_library_asset_skips_scrub(repo, make_index):
    _add_library(repo)
    scrubber = MagicMock()
    main, library = make_index(), make_index(batch_size=100)
    outcome = AssetDeleter(repo, main, library_index=library, scrubber=scrubber).delete_asset("lib-1")

    assert outcome.success
    scrubber.scrub.assert_not_called()
    assert main.calls == []
    assert library.deleted_ids == ["lib-1-v0", "lib-1-v1"]


def test_scrub_failure_is_a_warning(repo, make_index):
    repo.add_chat("chat-1", "user-1")
    _add_document(repo, chat_id="chat-1")
    scrubber = MagicMock()
    scrubber.scrub.side_effect = ScrubFailed("chat-1", ["m9"], 2)

    outcome = AssetDeleter(repo, make_index(), scrubber=scrubber).delete_asset("doc-1")

    assert outcome.success
    assert outcome.messages_scrubbed == 2
    assert len(outcome.warnings) == 1
    assert "chat-1" in outcome.warnings[0]
    assert repo.get_asset("doc-1") is None


def test_scrub_of_chat_without_messages(repo, make_index):
    repo.add_chat("chat-1", "user-1")
    _add_document(repo, chat_id="chat-1")
    outcome = AssetDeleter(repo, make_index(), scrubber=ReferenceScrubber(repo)).delete_asset("doc-1")
    assert outcome.success
    assert outcome.messages_scrubbed == 0


# ---------------------------------------------------------------------------
# Metadata step
# ---------------------------------------------------------------------------


def test_metadata_failure_reported(repo, make_index):
    _add_document(repo)
    with patch.object(repo, "delete_asset_row", side_effect=sqlite3.OperationalError("disk I/O error")):
        outcome = AssetDeleter(repo, make_index()).delete_asset("doc-1")
    assert not outcome.success
    assert outcome.error_code == "metadata_delete_failed"
    assert "disk I/O error" in outcome.error


def test_row_already_gone_still_succeeds(repo, make_index):
    _add_document(repo)
    with patch.object(repo, "delete_asset_row", return_value=False):
        outcome = AssetDeleter(repo, make_index()).delete_asset("doc-1")
    assert outcome.success
    assert outcome.already_gone


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


def test_batch_partial_failure_isolated(repo, make_index):
    for i in range(1, 6):
        _add_document(repo, f"doc-{i}", name=f"file-{i}.pdf")
    real_delete_row = repo.delete_asset_row

    def flaky(asset):
        if asset.id == "doc-3":
            raise sqlite3.OperationalError("disk I/O error")
        return real_delete_row(asset)

    with patch.object(repo, "delete_asset_row", side_effect=flaky):
        result = AssetDeleter(repo, make_index()).delete_assets([f"doc-{i}" for i in range(1, 6)])

    assert result.deleted_count == 4
    assert result.failed_file_names == ["file-3.pdf"]
    assert result.status is BatchStatus.PARTIAL
    assert repo.get_asset("doc-3") is not None
    assert repo.get_asset("doc-5") is None


def test_batch_unknown_id_reported_by_id(repo, make_index):
    _add_document(repo)
    result = AssetDeleter(repo, make_index()).delete_assets(["doc-1", "ghost"])
    assert result.deleted_count == 1
    assert result.failed_file_names == ["ghost"]


def test_batch_all_failed(repo, make_index):
    result = AssetDeleter(repo, make_index()).delete_assets(["ghost-1", "ghost-2"])
    assert result.status is BatchStatus.FAILED
    assert result.deleted_count == 0


def test_empty_batch_is_complete(repo, make_index):
    result = AssetDeleter(repo, make_index()).delete_assets([])
    assert result.status is BatchStatus.COMPLETE
    assert result.outcomes == []


def test_unexpected_error_does_not_stop_batch(repo, make_index):
    _add_document(repo, "doc-1")
    _add_document(repo, "doc-2")
    real_get = repo.get_asset

    def exploding(asset_id):
        if asset_id == "doc-1":
            raise RuntimeError("boom")
        return real_get(asset_id)

    with patch.object(repo, "get_asset", side_effect=exploding):
        result = AssetDeleter(repo, make_index()).delete_assets(["doc-1", "doc-2"])

    assert result.deleted_count == 1
    assert result.failed_file_names == ["doc-1"]
    assert result.outcomes[0].error_code == "unexpected"


def test_store_error_on_lookup_becomes_outcome(make_index):
    repo = MagicMock()
    repo.get_asset.side_effect = sqlite3.OperationalError("database is locked")
    index = make_index()

    outcome = AssetDeleter(repo, index).delete_asset("doc-1")

    assert not outcome.success
    assert outcome.error_code == "unexpected"
    assert "database is locked" in outcome.error
    assert index.calls == []


def test_unexpected_pipeline_error_keeps_file_name(repo, make_index):
    _add_document(repo, name="report.pdf")
    with patch.object(AssetDeleter, "_delete_vectors", side_effect=RuntimeError("boom")):
        outcome = AssetDeleter(repo, make_index()).delete_asset("doc-1")

    assert outcome.error_code == "unexpected"
    assert outcome.display_name == "report.pdf"
    assert repo.get_asset("doc-1") is not None


def test_batch_forbidden_reported_by_file_name(repo, make_index):
    _add_document(repo, owner="user-1", name="a.pdf")
    result = AssetDeleter(repo, make_index()).delete_assets(["doc-1"], owner_id="other")

    assert result.failed_file_names == ["a.pdf"]
    assert result.outcomes[0].error_code == "forbidden"
    assert result.status is BatchStatus.FAILED


# ---------------------------------------------------------------------------
# Owner wipe
# ---------------------------------------------------------------------------


def test_wipe_owner_deletes_documents_and_images_only(repo, make_index):
    _add_document(repo, "d1", owner="user-1")
    _add_document(repo, "d2", owner="user-1")
    _add_image(repo, "img-1", owner="user-1")
    _add_document(repo, "d3", owner="user-2")
    _add_library(repo, "lib-1")

    result = AssetDeleter(repo, make_index()).delete_all_assets_for_owner("user-1")

    assert result.deleted == 3
    assert result.failed == 0
    assert result.status is BatchStatus.COMPLETE
    assert repo.list_assets_by_owner("user-1") == []
    assert repo.get_asset("d3") is not None
    assert repo.get_asset("lib-1") is not None


def test_wipe_owner_without_assets(repo, make_index):
    result = AssetDeleter(repo, make_index()).delete_all_assets_for_owner("nobody")
    assert (result.deleted, result.failed) == (0, 0)


# ---------------------------------------------------------------------------
# End to end with the local vector index
# ---------------------------------------------------------------------------


def test_local_index_left_without_orphans(repo, tmp_db):
    index = SqliteVecIndex(tmp_db, "vec_assets_test")
    _add_document(repo, "doc-1", chunks=3)
    _add_document(repo, "doc-2", chunks=2)
    for chunk in repo.list_chunks(repo.get_asset("doc-1")) + repo.list_chunks(repo.get_asset("doc-2")):
        index.add(chunk.vector_id, [0.1, 0.2, 0.3])

    outcome = AssetDeleter(repo, index).delete_asset("doc-1")

    assert outcome.success
    assert index.count() == 2
    assert not index.contains("doc-1-v0")
    assert index.contains("doc-2-v0")
    assert repo.count_orphaned_vectors() == 0


@pytest.mark.parametrize("owner", [None, "user-1"])
def test_delete_asset_owner_none_is_admin(repo, make_index, owner):
    _add_document(repo, owner="user-1")
    assert AssetDeleter(repo, make_index()).delete_asset("doc-1", owner_id=owner).success
