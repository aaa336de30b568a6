from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Protocol, Optional


@dataclass(frozen=True)
class NamingContext:
    source_name: Optional[str]


class NamingStrategy(Protocol):
    def strategy_id(self) -> str: ...
    def propose_filename(self, ctx: NamingContext) -> str: ...


class DefaultSuffixStrategy:
    """Default: file.pdf -> file_signed.pdf, no source name -> signed.pdf"""
    def __init__(self, suffix: str = "_signed", default_filename: str = "signed.pdf") -> None:
        self._suffix = suffix
        self._default = default_filename

    def strategy_id(self) -> str:
        return "default_suffix"

    def propose_filename(self, ctx: NamingContext) -> str:
        if not ctx.source_name:
            return self._default
        root, ext = os.path.splitext(os.path.basename(ctx.source_name))
        if ext.lower() != ".pdf":
            ext = ".pdf"
        return f"{root}{self._suffix}{ext}"
