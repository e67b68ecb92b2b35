"""Tests for the fragment model and service, run against each backend."""

import json

import pytest

from common.exceptions import FragmentNotFoundError, InvalidDataError, OwnerMismatchError, UnsupportedTypeError
from common.types import FragmentSummary
from fragments.fragment import Fragment
from fragments.service import FragmentService


class TestTypeAllowList:
    """Test MIME allow-list checks."""

    def test_supported_types(self, memory_backend):
        service = FragmentService(memory_backend)

        assert service.is_supported_type("text/plain")
        assert service.is_supported_type("text/plain; charset=utf-8")
        assert service.is_supported_type("application/json")
        assert service.is_supported_type("text/xml")
        assert not service.is_supported_type("image/png")
        assert not service.is_supported_type("application/pdf")

    def test_extra_types_widen_allow_list(self, memory_backend):
        service = FragmentService(memory_backend, extra_types=["image/png"])
        assert service.is_supported_type("image/png")

    def test_create_rejects_unsupported_type(self, memory_backend):
        service = FragmentService(memory_backend)

        with pytest.raises(UnsupportedTypeError) as exc_info:
            service.create("owner-a", "application/pdf")

        assert exc_info.value.type == "application/pdf"

    def test_create_rejects_non_bytes(self, memory_backend):
        service = FragmentService(memory_backend)

        with pytest.raises(InvalidDataError):
            service.create("owner-a", "text/plain", data="not bytes")


class TestFragmentLifecycle:
    """Create, read, update and delete through the service."""

    @pytest.mark.asyncio
    async def test_create_save_and_read_back(self, service):
        fragment = service.create("owner-a", "text/plain", data=b"hello")
        await fragment.save()

        loaded = await service.by_id("owner-a", fragment.id)

        assert loaded.size == 5
        assert loaded.type == "text/plain"
        assert loaded.created == fragment.created
        assert loaded.data is None
        assert await loaded.get_data() == b"hello"
        assert await service.by_id_data("owner-a", fragment.id) == b"hello"

    @pytest.mark.asyncio
    async def test_save_without_data(self, service):
        fragment = service.create("owner-a", "text/markdown")
        await fragment.save()

        loaded = await service.by_id("owner-a", fragment.id)

        assert loaded.size == 0
        assert await service.by_id_data("owner-a", fragment.id) is None

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, service):
        first = service.create("owner-a", "text/plain")
        second = service.create("owner-a", "text/plain")
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_other_owner_cannot_read(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"secret").save()

        assert await service.by_id("owner-b", fragment.id) is None
        assert await service.by_id_data("owner-b", fragment.id) is None

    @pytest.mark.asyncio
    async def test_update_replaces_type_and_data(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"hello").save()

        await fragment.update(b"# Heading", type="text/markdown")

        loaded = await service.by_id("owner-a", fragment.id)
        assert loaded.type == "text/markdown"
        assert loaded.size == 9
        assert loaded.updated >= loaded.created
        assert await loaded.get_data() == b"# Heading"

    @pytest.mark.asyncio
    async def test_update_keeps_type_when_omitted(self, service):
        fragment = await service.create("owner-a", "text/css", data=b"a{}").save()

        await fragment.update(b"b{}")

        assert (await service.by_id("owner-a", fragment.id)).type == "text/css"

    @pytest.mark.asyncio
    async def test_update_rejects_bad_input(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"x").save()

        with pytest.raises(InvalidDataError):
            await fragment.update("string")
        with pytest.raises(InvalidDataError):
            await fragment.update(b"")
        with pytest.raises(UnsupportedTypeError):
            await fragment.update(b"y", type="application/pdf")

        assert await service.by_id_data("owner-a", fragment.id) == b"x"

    @pytest.mark.asyncio
    async def test_update_accepts_extra_types(self, backend):
        service = FragmentService(backend, extra_types=["image/png"])
        fragment = await service.create("owner-a", "text/plain", data=b"x").save()

        await fragment.update(b"\x89PNG", type="image/png")

        assert (await service.by_id("owner-a", fragment.id)).type == "image/png"

    @pytest.mark.asyncio
    async def test_foreign_owner_cannot_overwrite(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"mine").save()
        intruder = Fragment(service.backend, owner_id="owner-b", fragment_id=fragment.id, type="text/plain",
                            data=b"theirs")

        with pytest.raises(OwnerMismatchError) as exc_info:
            await intruder.save()

        assert str(exc_info.value) == f"Fragment {fragment.id} not found"
        assert await service.by_id_data("owner-a", fragment.id) == b"mine"

    @pytest.mark.asyncio
    async def test_delete(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"x").save()

        assert await service.delete("owner-b", fragment.id) is False
        assert await service.delete("owner-a", fragment.id) is True
        assert await service.by_id("owner-a", fragment.id) is None
        assert await service.by_id_data("owner-a", fragment.id) is None
        assert await service.delete("owner-a", fragment.id) is False

    @pytest.mark.asyncio
    async def test_update_after_delete_does_not_recreate(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"x").save()
        await service.delete("owner-a", fragment.id)

        with pytest.raises(FragmentNotFoundError) as exc_info:
            await fragment.update(b"revived")

        assert not isinstance(exc_info.value, OwnerMismatchError)
        assert await service.by_id("owner-a", fragment.id) is None
        assert await service.by_id_data("owner-a", fragment.id) is None
        assert await service.by_user("owner-a") == []

    @pytest.mark.asyncio
    async def test_update_of_unsaved_fragment(self, service):
        fragment = service.create("owner-a", "text/plain", data=b"draft")

        with pytest.raises(FragmentNotFoundError):
            await fragment.update(b"changed")

        assert await service.by_id("owner-a", fragment.id) is None

    @pytest.mark.asyncio
    async def test_foreign_owner_cannot_update(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"mine").save()
        intruder = Fragment(service.backend, owner_id="owner-b", fragment_id=fragment.id, type="text/plain")

        with pytest.raises(OwnerMismatchError):
            await intruder.update(b"theirs")

        assert await service.by_id_data("owner-a", fragment.id) == b"mine"


class TestListing:
    """Test by_user projections and expansion."""

    @pytest.mark.asyncio
    async def test_by_user_returns_projections(self, service):
        first = await service.create("owner-a", "text/plain", data=b"1").save()
        second = await service.create("owner-a", "text/plain", data=b"22").save()
        await service.create("owner-b", "text/plain", data=b"3").save()

        items = await service.by_user("owner-a")

        assert all(isinstance(item, FragmentSummary) for item in items)
        assert {item.id for item in items} == {first.id, second.id}

    @pytest.mark.asyncio
    async def test_by_user_expanded_loads_data(self, service):
        fragment = await service.create("owner-a", "text/plain", data=b"abc").save()

        items = await service.by_user("owner-a", expand=True)

        assert len(items) == 1
        assert isinstance(items[0], Fragment)
        assert items[0].id == fragment.id
        assert items[0].size == 3
        assert items[0].data == b"abc"

    @pytest.mark.asyncio
    async def test_by_user_unknown_owner(self, service):
        assert await service.by_user("nobody") == []
        assert await service.by_user("nobody", expand=True) == []


class TestFragmentViews:
    """Test derived properties and JSON views."""

    def test_mime_type_and_extension(self, memory_backend):
        fragment = FragmentService(memory_backend).create("owner-a", "text/html; charset=utf-8")

        assert fragment.mime_type == "text/html"
        assert fragment.is_text
        assert fragment.extension == ".html"

    def test_extension_fallback(self, memory_backend):
        fragment = Fragment(memory_backend, "owner-a", "frag-1", type="application/octet-stream")
        assert fragment.extension == ".txt"
        assert not fragment.is_text

    def test_formats(self, memory_backend):
        fragment = FragmentService(memory_backend).create("owner-a", "text/css")

        formats = fragment.formats

        assert "text/css" in formats
        assert "text/html" in formats
        assert "text/javascript" in formats

    def test_to_dict_excludes_data(self, memory_backend):
        fragment = FragmentService(memory_backend).create("owner-a", "text/plain", data=b"hello")

        view = fragment.to_dict()

        assert set(view) == {"id", "owner_id", "type", "size", "created", "updated"}
        assert view["size"] == 5

    def test_to_json_uses_wire_names(self, memory_backend):
        fragment = FragmentService(memory_backend).create("owner-a", "text/plain", data=b"hello")

        view = fragment.to_json()

        assert view["ownerId"] == "owner-a"
        assert "owner_id" not in view
        json.dumps(view)

    def test_repr(self, memory_backend):
        fragment = Fragment(memory_backend, "owner-a", "frag-1", type="text/plain")
        assert repr(fragment) == "Fragment(id='frag-1', owner_id='owner-a', type='text/plain', size=0)"
