import os
import random
import sys

import pytest

# Make the top-level modules importable without installing the project.
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from game_logic import GridState, SnakeConfig  # noqa: E402


@pytest.fixture
def config():
    return SnakeConfig(grid_size=20, initial_speed=5.0, speed_increment=0.3, max_speed=25.0)


@pytest.fixture
def grid(config):
    return GridState(config, rng=random.Random(1234))
