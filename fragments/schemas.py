"""Pydantic schemas for the JSON views of fragments handed to request handlers."""

from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field


class FragmentResponse(BaseModel):
    """Metadata view of one fragment."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    owner_id: str = Field(serialization_alias="ownerId")
    type: str
    size: int
    created: str
    updated: str


class FragmentSummaryResponse(BaseModel):
    """Listing projection of one fragment."""
    id: str
    created: str
    updated: str


class ListFragmentsResponse(BaseModel):
    """Response model for fragment listing."""
    status: str = "ok"
    fragments: List[Union[FragmentResponse, FragmentSummaryResponse]]


def to_list_response(items) -> ListFragmentsResponse:
    """
    Build the listing view from FragmentService.by_user() output.

    Args:
        items: FragmentSummary projections, or expanded Fragment entities

    Returns:
        ListFragmentsResponse; payload bytes are never included
    """
    fragments = []
    for item in items:
        if hasattr(item, "owner_id"):
            fragments.append(FragmentResponse(**item.to_dict()))
        else:
            fragments.append(FragmentSummaryResponse(**item.to_dict()))
    return ListFragmentsResponse(fragments=fragments)
