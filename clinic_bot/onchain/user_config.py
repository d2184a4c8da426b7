"""Aave v3 ``UserConfigurationMap`` bitmap.

Two bits per reserve id: bit ``2*i`` is set when the user borrows reserve
``i``, bit ``2*i+1`` when reserve ``i`` is enabled as collateral.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UserConfiguration:
    borrowed_ids: frozenset[int]
    collateral_ids: frozenset[int]


def config_data(raw) -> int:
    # getUserConfiguration returns a single-field struct
    if isinstance(raw, (tuple, list)):
        raw = raw[0]
    return int(raw)


def is_borrowing(data: int, reserve_id: int) -> bool:
    return (int(data) >> (reserve_id * 2)) & 1 == 1


def is_using_as_collateral(data: int, reserve_id: int) -> bool:
    if reserve_id < 0:
        return False
    return (int(data) >> (reserve_id * 2 + 1)) & 1 == 1


def decode_user_configuration(data: int) -> UserConfiguration:
    data = int(data)
    borrowed, collateral = set(), set()
    i = 0
    while data >> (i * 2):
        if is_borrowing(data, i):
            borrowed.add(i)
        if is_using_as_collateral(data, i):
            collateral.add(i)
        i += 1
    return UserConfiguration(frozenset(borrowed), frozenset(collateral))
