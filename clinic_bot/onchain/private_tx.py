from __future__ import annotations

import json

import aiohttp
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

DEFAULT_BUILDERS = ("flashbots", "beaverbuild.org", "Titan", "rsync")


def build_private_tx_request(raw_tx: bytes, max_block_number: int, builders=DEFAULT_BUILDERS) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "eth_sendPrivateTransaction",
        "params": [
            {
                "tx": Web3.to_hex(raw_tx),
                "maxBlockNumber": hex(int(max_block_number)),
                "preferences": {
                    "fast": True,
                    "privacy": {"hints": ["hash"], "builders": list(builders)},
                },
            }
        ],
    }


def flashbots_signature(account, body: str) -> str:
    """``X-Flashbots-Signature`` value: address plus a personal_sign of keccak(body) as hex text."""
    digest = Web3.to_hex(Web3.keccak(text=body))
    signed = Account.sign_message(encode_defunct(text=digest), private_key=account.key)
    return f"{account.address}:{Web3.to_hex(signed.signature)}"


class PrivateTxRelay:
    """Submits signed transactions to a builder relay instead of the public mempool."""

    def __init__(self, url: str, *, timeout: float = 30.0):
        self.url = url
        self._timeout = aiohttp.ClientTimeout(total=max(1.0, float(timeout)))

    async def send(self, account, raw_tx: bytes, *, current_block: int, window: int = 100) -> str:
        payload = build_private_tx_request(raw_tx, current_block + window)
        body = json.dumps(payload, separators=(",", ":"))
        headers = {
            "Content-Type": "application/json",
            "X-Flashbots-Signature": flashbots_signature(account, body),
        }
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.post(self.url, data=body, headers=headers) as r:
                text = await r.text()
                if r.status >= 400:
                    raise RuntimeError(f"relay http {r.status}: {text[:200]}")
        out = json.loads(text or "{}")
        if out.get("error"):
            raise RuntimeError(f"relay error: {out['error']}")
        return Web3.to_hex(Web3.keccak(raw_tx))
