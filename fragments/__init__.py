"""Fragment model: entity, service and read-by-extension helper."""

from fragments.bootstrap import create_service
from fragments.fragment import Fragment
from fragments.reader import FragmentContent, read_fragment_as, split_extension
from fragments.schemas import FragmentResponse, ListFragmentsResponse, to_list_response
from fragments.service import FragmentService

__all__ = [
    "Fragment",
    "FragmentContent",
    "FragmentResponse",
    "ListFragmentsResponse",
    "FragmentService",
    "read_fragment_as",
    "create_service",
    "split_extension",
    "to_list_response",
]
