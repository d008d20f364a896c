"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Sample rack inventories
- Sample patch documents
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

if TYPE_CHECKING:
    from patchrefine.models import ParsedRack, Patch

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Rack Fixtures
# =============================================================================


@pytest.fixture
def sample_rack() -> ParsedRack:
    """Create a small rack with an oscillator, filter, VCA, effect and clock.

    Returns:
        ParsedRack whose "Clouds" module (type Effect) serves reverb, delay
        and distortion requests.
    """
    from patchrefine.models import ParsedRack

    return ParsedRack.model_validate(
        {
            "url": "https://www.modulargrid.net/e/racks/view/1",
            "modules": [
                {
                    "id": "vco-1",
                    "name": "Plaits",
                    "manufacturer": "Mutable Instruments",
                    "type": "VCO",
                    "hp": 12,
                    "power": 50,
                    "inputs": [{"name": "V/OCT", "type": "cv"}],
                    "outputs": [{"name": "OUT", "type": "audio"}],
                },
                {
                    "id": "filter-1",
                    "name": "Ripples",
                    "manufacturer": "Mutable Instruments",
                    "type": "VCF",
                    "hp": 8,
                    "power": 40,
                    "inputs": [{"name": "IN", "type": "audio"}, {"name": "FREQ", "type": "cv"}],
                    "outputs": [{"name": "LP4", "type": "audio"}],
                },
                {
                    "id": "vca-1",
                    "name": "Veils",
                    "manufacturer": "Mutable Instruments",
                    "type": "VCA",
                    "hp": 12,
                    "power": 30,
                    "inputs": [{"name": "IN 1", "type": "audio"}, {"name": "CV 1", "type": "cv"}],
                    "outputs": [{"name": "OUT 1", "type": "audio"}],
                },
                {
                    "id": "reverb-1",
                    "name": "Clouds",
                    "manufacturer": "Mutable Instruments",
                    "type": "Effect",
                    "hp": 18,
                    "power": {"positive12V": 100, "negative12V": 10},
                    "inputs": [{"name": "IN L", "type": "audio"}],
                    "outputs": [{"name": "OUT L", "type": "audio"}],
                },
                {
                    "id": "clock-1",
                    "name": "Pam's New Workout",
                    "manufacturer": "ALM Busy Circuits",
                    "type": "Clock",
                    "hp": 8,
                    "power": 60,
                    "inputs": [],
                    "outputs": [{"name": "1", "type": "gate"}],
                },
            ],
        }
    )


@pytest.fixture
def bare_rack() -> ParsedRack:
    """Create a rack holding only a filter: no effects, VCA or clock."""
    from patchrefine.models import ParsedRack

    return ParsedRack.model_validate(
        {
            "modules": [
                {
                    "id": "filter-1",
                    "name": "Ripples",
                    "type": "VCF",
                    "hp": 8,
                    "inputs": ["IN"],
                    "outputs": ["LP4"],
                }
            ]
        }
    )


# =============================================================================
# Patch Fixtures
# =============================================================================


@pytest.fixture
def sample_patch() -> Patch:
    """Create a two-cable drone patch: Plaits -> Ripples -> Veils.

    Returns:
        Patch with a 5kHz cutoff suggestion on Ripples and a 70% level
        suggestion on Veils.
    """
    from patchrefine.models import Patch

    return Patch.model_validate(
        {
            "id": "test-patch-1",
            "userId": "user-1",
            "rackId": "rack-1",
            "metadata": {
                "title": "Dark Ambient Drone",
                "description": "Slow evolving drone",
                "difficulty": "beginner",
                "estimatedTime": 10,
                "techniques": ["filtering"],
                "genres": ["ambient"],
            },
            "connections": [
                {
                    "id": "conn-1",
                    "from": {"moduleId": "vco-1", "moduleName": "Plaits", "outputName": "OUT"},
                    "to": {"moduleId": "filter-1", "moduleName": "Ripples", "inputName": "IN"},
                    "signalType": "audio",
                    "importance": "primary",
                },
                {
                    "id": "conn-2",
                    "from": {"moduleId": "filter-1", "moduleName": "Ripples", "outputName": "LP4"},
                    "to": {"moduleId": "vca-1", "moduleName": "Veils", "inputName": "IN 1"},
                    "signalType": "audio",
                    "importance": "primary",
                },
            ],
            "patchingOrder": ["conn-1", "conn-2"],
            "parameterSuggestions": [
                {
                    "moduleId": "filter-1",
                    "moduleName": "Ripples",
                    "parameter": "cutoff",
                    "value": "5kHz",
                    "reasoning": "Open enough for the drone to breathe",
                },
                {
                    "moduleId": "vca-1",
                    "moduleName": "Veils",
                    "parameter": "level",
                    "value": "70%",
                },
            ],
            "whyThisWorks": "A filtered oscillator through a VCA",
            "tips": ["Slowly sweep the cutoff"],
        }
    )
