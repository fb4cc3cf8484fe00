"""
RollSim Kind Constants (behavior-centric, extensible).
"""


class K:
    # === Investment modes (one strategy per mode) ===
    MODE_SIP = "sip"  # Periodic monthly contributions
    MODE_LUMPSUM = "lumpsum"  # One-time investment at window start

    # === Ledger entry kinds ===
    TX_CONTRIBUTE = "contribute"
    TX_REBALANCE = "rebalance"
    TX_ANNUAL_ADJUST = "annual_adjust"  # Glide-path driven reallocation
    TX_LIQUIDATE = "liquidate"
    TX_MARK = "mark"  # Valuation only, no cash or unit effect

    # === Optional features a mode may support ===
    FEATURE_REBALANCE = "rebalance"
    FEATURE_STEP_UP = "step_up"
    FEATURE_TRANSITION = "transition"

    @classmethod
    def all_modes(cls) -> list[str]:
        """Enumerate all known investment modes."""
        return [cls.MODE_SIP, cls.MODE_LUMPSUM]

    @classmethod
    def all_entry_kinds(cls) -> list[str]:
        """Enumerate all ledger entry kinds (for validation and docs)."""
        return [
            cls.TX_CONTRIBUTE,
            cls.TX_REBALANCE,
            cls.TX_ANNUAL_ADJUST,
            cls.TX_LIQUIDATE,
            cls.TX_MARK,
        ]

    @classmethod
    def cash_kinds(cls) -> list[str]:
        """Entry kinds that move cash and therefore feed the return solver."""
        return [
            cls.TX_CONTRIBUTE,
            cls.TX_REBALANCE,
            cls.TX_ANNUAL_ADJUST,
            cls.TX_LIQUIDATE,
        ]
