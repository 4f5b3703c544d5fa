"""Request validation tests."""

import pytest

from app.errors import (
    EmptyListError,
    InvalidDirectionError,
    InvalidIDFormatError,
    InvalidOrderError,
    InvalidRoleError,
    LimitSizeError,
    MissingCredentialError,
    MissingIDError,
    MissingKeyError,
    MissingThingKeyError,
    NameSizeError,
    OffsetSizeError,
)
from app.paging import PageMetadata, build_page_metadata
from app.requests.backup import THINGS, RestoreReq
from app.requests.common import ListByScopeReq, ListReq, RemoveReq
from app.requests.groups import CreateGroupsReq
from app.requests.memberships import GroupMembershipsReq, ListMembershipsReq
from app.requests.things import CreateThingsReq, ThingKeyReq, UpdateThingReq
from app.schemas.backup import BackupDocument
from app.schemas.groups import GroupCreate
from app.schemas.memberships import MembershipEntry
from app.schemas.things import ThingCreate, ThingRecord

VALID_ID = "3f1c1b3e-8d7a-4d5e-9a51-2c3b4d5e6f70"


class TestPageMetadata:
    """Paging defaults and bounds."""

    def test_absent_and_zero_limit_use_default(self) -> None:
        assert build_page_metadata(default_limit=10).limit == 10
        assert build_page_metadata(default_limit=10, limit=0).limit == 10
        assert build_page_metadata(default_limit=10, limit=7, offset=3) == PageMetadata(
            offset=3, limit=7
        )

    @pytest.mark.parametrize("limit", [201, -1])
    def test_limit_outside_ceiling_is_rejected(self, limit: int) -> None:
        req = ListReq(token="t", page=PageMetadata(limit=limit))
        with pytest.raises(LimitSizeError):
            req.validate()

    def test_limit_at_ceiling_is_accepted(self) -> None:
        ListReq(token="t", page=PageMetadata(limit=200)).validate()

    def test_negative_offset_is_rejected(self) -> None:
        with pytest.raises(OffsetSizeError):
            ListReq(token="t", page=PageMetadata(offset=-1)).validate()

    def test_offset_beyond_storage_integer_is_rejected(self) -> None:
        ListReq(token="t", page=PageMetadata(offset=2**63 - 1)).validate()
        with pytest.raises(OffsetSizeError):
            ListReq(token="t", page=PageMetadata(offset=2**63)).validate()

    def test_name_length_boundary(self) -> None:
        ListReq(token="t", page=PageMetadata(name="n" * 1024)).validate()
        with pytest.raises(NameSizeError):
            ListReq(token="t", page=PageMetadata(name="n" * 1025)).validate()

    def test_unknown_order_and_direction_are_rejected(self) -> None:
        with pytest.raises(InvalidOrderError):
            ListReq(token="t", page=PageMetadata(order="created")).validate()
        with pytest.raises(InvalidDirectionError):
            ListReq(token="t", page=PageMetadata(direction="up")).validate()

    def test_membership_ceiling_and_orders(self) -> None:
        ListMembershipsReq(
            token="t", group_id=VALID_ID, page=PageMetadata(limit=100, order="email")
        ).validate()
        with pytest.raises(LimitSizeError):
            ListMembershipsReq(
                token="t", group_id=VALID_ID, page=PageMetadata(limit=101)
            ).validate()
        with pytest.raises(InvalidOrderError):
            ListMembershipsReq(
                token="t", group_id=VALID_ID, page=PageMetadata(order="name")
            ).validate()


class TestRequestValidation:
    """Descriptor checks run before any service call."""

    def test_token_is_checked_first(self) -> None:
        req = ListByScopeReq(
            token="", scope="group", scope_id="", page=PageMetadata(limit=500)
        )
        with pytest.raises(MissingCredentialError):
            req.validate()

    def test_missing_scope_id(self) -> None:
        req = ListByScopeReq(token="t", scope="group", scope_id="", page=PageMetadata())
        with pytest.raises(MissingIDError) as exc_info:
            req.validate()
        assert exc_info.value.message == "missing group id"

    def test_validate_is_pure(self) -> None:
        req = CreateThingsReq(
            token="t",
            profile_id=VALID_ID,
            things=(ThingCreate(name="a"), ThingCreate(name="n" * 1025)),
        )
        for _ in range(2):
            with pytest.raises(NameSizeError):
                req.validate()
        assert req.things[1].name == "n" * 1025

    def test_create_rejects_empty_list_and_bad_ids(self) -> None:
        with pytest.raises(EmptyListError):
            CreateGroupsReq(token="t", org_id=VALID_ID, groups=()).validate()
        with pytest.raises(InvalidIDFormatError):
            CreateGroupsReq(
                token="t",
                org_id=VALID_ID,
                groups=(GroupCreate(id="not-a-uuid", name="g"),),
            ).validate()
        with pytest.raises(InvalidIDFormatError):
            CreateGroupsReq(
                token="t",
                org_id=VALID_ID,
                groups=(GroupCreate(id=VALID_ID.upper(), name="g"),),
            ).validate()

    def test_create_requires_a_name(self) -> None:
        with pytest.raises(NameSizeError):
            CreateGroupsReq(
                token="t", org_id=VALID_ID, groups=(GroupCreate(name=""),)
            ).validate()

    def test_thing_update_requires_key(self) -> None:
        with pytest.raises(MissingKeyError):
            UpdateThingReq(token="t", id=VALID_ID, name="a", key="").validate()

    def test_bulk_remove_requires_ids(self) -> None:
        with pytest.raises(EmptyListError):
            RemoveReq(token="t", entity="thing", ids=()).validate()
        with pytest.raises(MissingIDError):
            RemoveReq(token="t", entity="thing", ids=(VALID_ID, "")).validate()

    def test_thing_key_is_required(self) -> None:
        with pytest.raises(MissingThingKeyError):
            ThingKeyReq(value="").validate()

    @pytest.mark.parametrize("role", ["owner", "Owner", "OWNER", "superuser", ""])
    def test_membership_roles_outside_assignable_set(self, role: str) -> None:
        req = GroupMembershipsReq(
            token="t",
            group_id=VALID_ID,
            memberships=(MembershipEntry(member_id=VALID_ID, role=role),),
        )
        with pytest.raises(InvalidRoleError):
            req.validate()

    def test_restore_requires_relevant_collection(self) -> None:
        req = RestoreReq(
            token="t",
            document=BackupDocument(),
            collections=(THINGS,),
            scope="group",
            scope_id=VALID_ID,
        )
        with pytest.raises(EmptyListError):
            req.validate()

    def test_restore_things_need_a_profile(self) -> None:
        req = RestoreReq(
            token="t",
            document=BackupDocument(things=[ThingRecord(id=VALID_ID, name="a")]),
            collections=(THINGS,),
            scope="group",
            scope_id=VALID_ID,
        )
        with pytest.raises(MissingIDError):
            req.validate()
