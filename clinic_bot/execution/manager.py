from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from web3 import Web3

from clinic_bot.infra import RuntimeEventLogger, run_blocking
from clinic_bot.onchain import NonceManager, Operator, PrivateTxRelay


@dataclass(frozen=True)
class ExecutionResult:
    ok: bool
    reason: str
    tx_hash: str = ""
    gas: int = 0


class ExecutionManager:
    """Simulate-then-submit boundary. Nothing is signed unless the eth_call succeeded."""

    def __init__(
        self,
        operator: Operator,
        *,
        relay: PrivateTxRelay | None,
        events: RuntimeEventLogger,
        log: logging.Logger,
        dry_run: bool = True,
        private_tx_blocks: int = 100,
        receipt_timeout: float = 300.0,
        poll_interval: float = 2.0,
        nonces: NonceManager | None = None,
    ):
        self.operator = operator
        self.relay = relay
        self.events = events
        self.log = log
        self.dry_run = dry_run
        self.private_tx_blocks = private_tx_blocks
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.nonces = nonces

    def _event(self, event: str, label: str, **fields) -> None:
        self.events.emit(event, chain=self.operator.pool_cfg.key, label=label, **fields)

    async def simulate(self, call, *, gas: int, sim_from: str | None = None) -> None:
        sender = sim_from or self.operator.bot_address
        await run_blocking(lambda: call.call({"from": sender, "gas": gas}))

    def _build(self, call, gas: int, nonce: int) -> dict:
        w3 = self.operator.w3
        sender = self.operator.account.address
        params = {
            "from": sender,
            "nonce": nonce,
            "gas": int(gas),
            "chainId": self.operator.pool_cfg.chain_id,
        }
        if self.operator.pool_cfg.tx_type == "legacy":
            params["gasPrice"] = w3.eth.gas_price
        return call.build_transaction(params)

    def _wait(self, tx_hash, confirmations: int):
        w3 = self.operator.w3
        receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        deadline = time.time() + self.receipt_timeout
        while w3.eth.block_number - int(receipt["blockNumber"]) + 1 < confirmations:
            if time.time() > deadline:
                raise RuntimeError(f"timed out waiting for {confirmations} confirmations")
            time.sleep(self.poll_interval)
        return receipt

    async def execute(
        self,
        call,
        *,
        gas: int,
        label: str,
        confirmations: int = 5,
        sim_from: str | None = None,
    ) -> ExecutionResult:
        try:
            await self.simulate(call, gas=gas, sim_from=sim_from)
        except Exception as e:
            self.log.warning("Error simulating %s: %s", label, e)
            self._event("simulation_failed", label, gas=gas, error=str(e))
            return ExecutionResult(ok=False, reason="simulation_failed", gas=gas)
        self.log.info("simulation succeeded %s", label)

        if self.dry_run:
            self._event("dry_run", label, gas=gas)
            return ExecutionResult(ok=True, reason="dry_run", gas=gas)

        account = self.operator.account
        if account is None:
            self.log.error("no PRIVATE_KEY configured, cannot submit %s", label)
            return ExecutionResult(ok=False, reason="no_signer", gas=gas)

        w3 = self.operator.w3
        if self.nonces is None:
            self.nonces = NonceManager(w3, account.address)
        private = self.operator.pool_cfg.is_mainnet and self.relay is not None
        nonce = None
        try:
            nonce = await self.nonces.next_nonce()
            tx = await run_blocking(lambda: self._build(call, gas, nonce))
            signed = account.sign_transaction(tx)
            if private:
                block = await run_blocking(lambda: w3.eth.block_number)
                tx_hash = await self.relay.send(
                    account,
                    signed.raw_transaction,
                    current_block=block,
                    window=self.private_tx_blocks,
                )
                self.log.info("private tx sent %s %s", label, tx_hash)
                self._event("private_submitted", label, gas=gas, tx_hash=tx_hash)
                return ExecutionResult(ok=True, reason="private_submitted", tx_hash=tx_hash, gas=gas)

            self.log.info("trying to execute %s", label)
            raw_hash = await run_blocking(lambda: w3.eth.send_raw_transaction(signed.raw_transaction))
            tx_hash = Web3.to_hex(raw_hash)
            self._event("submitted", label, gas=gas, tx_hash=tx_hash)
            receipt = await run_blocking(lambda: self._wait(raw_hash, confirmations))
        except Exception as e:
            self.log.error("submission of %s failed: %s", label, e)
            if nonce is not None and not private:
                await self._release_nonce()
            self._event("submit_failed", label, gas=gas, error=str(e))
            return ExecutionResult(ok=False, reason="submit_failed", gas=gas)

        if int(receipt["status"]) != 1:
            self.log.error("transaction reverted %s %s", label, tx_hash)
            self._event("reverted", label, gas=gas, tx_hash=tx_hash)
            return ExecutionResult(ok=False, reason="reverted", tx_hash=tx_hash, gas=gas)
        self.log.info("transaction confirmed %s %s block=%s", label, tx_hash, receipt["blockNumber"])
        self._event("confirmed", label, gas=gas, tx_hash=tx_hash, block=int(receipt["blockNumber"]))
        return ExecutionResult(ok=True, reason="confirmed", tx_hash=tx_hash, gas=gas)

    async def _release_nonce(self) -> None:
        # public node sees every pending tx of ours, so its count is authoritative
        try:
            await self.nonces.reset_from_chain()
        except Exception as e:
            self.log.warning("nonce resync failed: %s", e)
