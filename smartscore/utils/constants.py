from typing import Iterable

# Solana program ids of the venues we track
PUMP_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"
RAYDIUM_PROGRAM_ID = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

TRADING_PROGRAM_IDS = frozenset({PUMP_PROGRAM_ID, RAYDIUM_PROGRAM_ID})


def is_trade_related(account_keys: Iterable[str]) -> bool:
    # A transaction counts as a trade when it touches a known venue program
    return any(str(key) in TRADING_PROGRAM_IDS for key in account_keys)
