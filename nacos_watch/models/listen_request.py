"""
Listen request model and the long-poll wire format.

A listening payload is a sequence of records, each terminated by SEP1, whose
fields are separated by SEP2:

    data_id SEP2 group SEP2 fingerprint SEP2 namespace SEP1

The payload is sent as a form field, so the control bytes travel as %02/%01.
The server answers with the changed records in the same layout, URL-encoded.
"""

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import unquote

from nacos_watch.utils.fingerprint import EMPTY_FINGERPRINT

WIRE_FORMAT_VERSION = 1

SEP1 = chr(1)  # record separator
SEP2 = chr(2)  # field separator


@dataclass(frozen=True)
class ListenRequest:
    """One watched entry plus the fingerprint of its last known content."""

    data_id: str
    group: str
    fingerprint: str = EMPTY_FINGERPRINT
    namespace: str = ''

    def encode(self) -> str:
        """Serialize as a single listening record."""
        return SEP2.join([self.data_id, self.group, self.fingerprint, self.namespace]) + SEP1

    @classmethod
    def from_subscription(cls, subscription) -> 'ListenRequest':
        return cls(
            data_id=subscription.data_id,
            group=subscription.group,
            fingerprint=subscription.last_fingerprint,
            namespace=subscription.namespace,
        )


def encode_listen_requests(requests: List[ListenRequest]) -> str:
    """Serialize several listening records into one payload."""
    return ''.join(request.encode() for request in requests)


def decode_listen_requests(payload: str) -> List[ListenRequest]:
    """
    Parse a listening payload back into requests.

    Records with three fields carry no namespace. Records with fewer than
    three fields are malformed and raise ValueError.
    """
    requests = []
    for record in _split_records(payload):
        fields = record.split(SEP2)
        if len(fields) == 3:
            data_id, group, fingerprint = fields
            namespace = ''
        elif len(fields) == 4:
            data_id, group, fingerprint, namespace = fields
        else:
            raise ValueError(f"Malformed listening record: {record!r}")
        requests.append(ListenRequest(data_id, group, fingerprint, namespace))
    return requests


def decode_changed_keys(body: str) -> List[List[str]]:
    """
    Decode a listener response into the field lists of the changed entries.

    The body is URL-encoded by the server; unquoting first means both the
    literal ``%02`` text and the raw control byte are accepted.

    Args:
        body: Raw response body

    Returns:
        One list of fields (data_id, group[, namespace]) per changed entry
    """
    decoded = unquote(body.strip())
    return [record.split(SEP2) for record in _split_records(decoded)]


def first_changed_data_id(body: str) -> Optional[str]:
    """Return the data id named by the first record of a listener response."""
    records = decode_changed_keys(body)
    if not records or not records[0] or not records[0][0]:
        return None
    return records[0][0]


def _split_records(payload: str) -> List[str]:
    return [record for record in payload.split(SEP1) if record]
