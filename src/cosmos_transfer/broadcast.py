"""
Transaction submission and inclusion tracking.

Per submission:

    BUILT -> SIGNED -> SUBMITTED -> {ACCEPTED, REJECTED, CONNECTION_FAILED}
    ACCEPTED -> {COMMITTED, TIMED_OUT_PENDING_UNKNOWN}

A transaction is sent to the endpoint exactly once. Polling only reads.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from loguru import logger

from cosmos_transfer.backends.base import TransactionSubmitter
from cosmos_transfer.backends.rest import rejection_from_result
from cosmos_transfer.errors import (
    InvalidArgument,
    NetworkConnectionError,
    NetworkError,
    RejectedByNetwork,
    TimedOutPendingUnknown,
)
from cosmos_transfer.models import BroadcastResult, BroadcastStatus, SignedTransaction

DEFAULT_INCLUSION_TIMEOUT = 60.0
DEFAULT_POLL_INTERVAL = 2.0


class SubmissionState(str, Enum):
    BUILT = "built"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CONNECTION_FAILED = "connection_failed"
    COMMITTED = "committed"
    TIMED_OUT_PENDING_UNKNOWN = "timed_out_pending_unknown"


class Broadcaster:
    """
    Submits one signed transaction and optionally waits for it to land in a block.

    Usage:
        broadcaster = Broadcaster(backend, timeout=60.0)
        result = await broadcaster.submit(signed)
    """

    def __init__(
        self,
        submitter: TransactionSubmitter,
        *,
        wait_for_inclusion: bool = True,
        timeout: float = DEFAULT_INCLUSION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        if timeout <= 0 or poll_interval <= 0:
            raise InvalidArgument("Inclusion timeout and poll interval must be positive")
        self.submitter = submitter
        self.wait_for_inclusion = wait_for_inclusion
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.state = SubmissionState.BUILT
        self._submitted: set[str] = set()

    def _transition(self, state: SubmissionState) -> None:
        logger.debug(f"Submission state: {self.state.value} -> {state.value}")
        self.state = state

    async def submit(self, signed: SignedTransaction) -> BroadcastResult:
        """
        Broadcast ``signed``.

        Returns:
            ACCEPTED result (when not waiting) or COMMITTED result

        Raises:
            NetworkConnectionError: Endpoint unreachable during submission
            RejectedByNetwork: CheckTx or DeliverTx failure
            TimedOutPendingUnknown: Accepted but not seen in a block in time
        """
        txhash = signed.txhash
        if txhash in self._submitted:
            raise InvalidArgument(f"Transaction {txhash} was already submitted; not resending")

        self._transition(SubmissionState.SIGNED)
        self._submitted.add(txhash)
        self._transition(SubmissionState.SUBMITTED)
        logger.info(f"Broadcasting transaction {txhash}...")

        try:
            accepted = await self.submitter.broadcast(signed.tx_bytes)
        except RejectedByNetwork as e:
            self._transition(SubmissionState.REJECTED)
            e.txhash = e.txhash or txhash
            logger.error(f"Transaction rejected: {e}")
            raise
        except NetworkError as e:
            self._transition(SubmissionState.CONNECTION_FAILED)
            logger.error(f"Broadcast failed: {e}")
            raise NetworkConnectionError(
                f"{e} (transaction {txhash} may or may not have reached the node)",
                txhash=txhash,
            ) from e

        self._transition(SubmissionState.ACCEPTED)
        if accepted.txhash and accepted.txhash != txhash:
            logger.warning(f"Node reported hash {accepted.txhash}, computed {txhash}")
        logger.info(f"Transaction {txhash} accepted into mempool")

        if not self.wait_for_inclusion:
            return accepted
        return await self._wait_for_inclusion(txhash)

    async def _wait_for_inclusion(self, txhash: str) -> BroadcastResult:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        logger.info(f"Waiting up to {self.timeout:g}s for inclusion...")

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                self._transition(SubmissionState.TIMED_OUT_PENDING_UNKNOWN)
                raise TimedOutPendingUnknown(txhash, self.timeout)

            # A lookup never outlives the inclusion deadline
            found: BroadcastResult | None = None
            try:
                found = await asyncio.wait_for(self.submitter.get_tx(txhash), timeout=remaining)
            except asyncio.TimeoutError:
                logger.warning(f"Inclusion poll for {txhash} did not answer in time")
            except NetworkError as e:
                logger.warning(f"Inclusion poll failed, will retry: {e}")

            if found is not None:
                if found.status == BroadcastStatus.REJECTED:
                    self._transition(SubmissionState.REJECTED)
                    raise rejection_from_result(found)
                self._transition(SubmissionState.COMMITTED)
                logger.info(f"Transaction {txhash} committed at height {found.height}")
                return found

            remaining = deadline - loop.time()
            if remaining > 0:
                await asyncio.sleep(min(self.poll_interval, remaining))
