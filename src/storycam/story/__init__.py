"""
Story Module
============

Presentation of the detective story around a capture session.

Components:
    - welcome: Opening "case file" screen content
    - results: Results screen view-model (face cards, metadata panel)
    - narrative: Detective narration built from face cards

Rendering is left to the UI layer (Streamlit app or terminal).
"""

from storycam.story.narrative import Narrative, narrate
from storycam.story.results import (
    Color,
    FaceCard,
    MetadataPanel,
    ResultsScreen,
    color_for_emotion,
)
from storycam.story.welcome import WelcomeScreen, build_welcome_screen


__all__ = [
    "Narrative",
    "narrate",
    "Color",
    "FaceCard",
    "MetadataPanel",
    "ResultsScreen",
    "color_for_emotion",
    "WelcomeScreen",
    "build_welcome_screen",
]
