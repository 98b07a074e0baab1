# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest

from bintraits import CapabilityRegistry, Traits, set_verbose


@pytest.fixture(autouse=True)
def _quiet_trace():
    """Verbose flag is process-wide; restore it after every test."""
    set_verbose(False)
    yield
    set_verbose(False)


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture
def traits(registry) -> Traits:
    return Traits(registry=registry)


@pytest.fixture
def animals(traits) -> Traits:
    """Swim, Fly and composite Amphibious defined in namespace 'zoo'."""
    traits.define("zoo", "Swim")
    traits.define("zoo", "Fly")
    traits.define("zoo", "Amphibious", constituents=["Swim", "Fly"])
    return traits
