from __future__ import annotations

import pytest

from stamping.logic.naming_strategy import DefaultSuffixStrategy, NamingContext


@pytest.mark.parametrize(
    "source, expected",
    [
        (None, "signed.pdf"),
        ("", "signed.pdf"),
        ("contract.pdf", "contract_signed.pdf"),
        ("/tmp/in/Offer.PDF", "Offer_signed.PDF"),
        ("scan", "scan_signed.pdf"),
    ],
)
def test_default_suffix(source, expected) -> None:
    assert DefaultSuffixStrategy().propose_filename(NamingContext(source_name=source)) == expected


def test_custom_suffix_and_default() -> None:
    strat = DefaultSuffixStrategy(suffix="-stamped", default_filename="out.pdf")
    assert strat.propose_filename(NamingContext(source_name=None)) == "out.pdf"
    assert strat.propose_filename(NamingContext(source_name="a.pdf")) == "a-stamped.pdf"
