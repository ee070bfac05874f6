"""
Simple page router for Streamlit tabs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from deckapp.pages.analytics import render_analytics_page
from deckapp.pages.decks import render_decks_page
from deckapp.pages.study import render_study_page


@dataclass(frozen=True)
class AppPage:
    title: str
    render: Callable[[dict[str, str]], None]


PAGES = [
    AppPage(title="Study", render=render_study_page),
    AppPage(title="Decks", render=render_decks_page),
    AppPage(title="Analytics", render=render_analytics_page),
]
