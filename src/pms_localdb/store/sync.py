"""Write paths into the local store: remote refreshes and parcel intake."""

from __future__ import annotations

import asyncio
from typing import Tuple

from ..logging import get_logger
from ..remote.client import RemoteDataClient
from . import service
from .models import ParcelSubmission


LOG = get_logger("localdb-sync")


async def refresh_customers(client: RemoteDataClient) -> int:
    """Upsert every contact the backend reports; returns how many were written."""
    contacts = await asyncio.to_thread(client.fetch_customer_contacts)
    await asyncio.gather(
        *(service.upsert_customer(c["customer_name"], c["mobile_no"]) for c in contacts)
    )
    LOG.info(f"Refreshed {len(contacts)} customer(s) from remote")
    return len(contacts)


async def refresh_vocabularies(client: RemoteDataClient) -> Tuple[int, int]:
    """Add every distinct description and remark the backend reports."""
    descriptions, remarks = await asyncio.to_thread(client.fetch_descriptions_and_remarks)
    await asyncio.gather(
        *(service.add_description(d) for d in descriptions),
        *(service.add_remark(r) for r in remarks),
    )
    LOG.info(f"Refreshed {len(descriptions)} description(s) and {len(remarks)} remark(s) from remote")
    return len(descriptions), len(remarks)


async def record_parcel_submission(submission: ParcelSubmission) -> None:
    """Push the contacts and free text of a submitted parcel into the store.

    Each write commits on its own. If one fails the error propagates and the
    writes before it stay in place.
    """
    await service.upsert_customer(submission.sender_name, submission.sender_mobile)
    await service.upsert_customer(submission.receiver_name, submission.receiver_mobile)
    if submission.description and submission.description.strip():
        await service.add_description(submission.description)
    if submission.remark and submission.remark.strip():
        await service.add_remark(submission.remark)
    LOG.debug(f"Recorded submission {submission.sender_mobile} -> {submission.receiver_mobile}")
