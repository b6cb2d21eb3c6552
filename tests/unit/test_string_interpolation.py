import pytest
from dockguard.UTILS.string_interpolation import EnvironmentInterpolator, InterpolationError

CONTEXT = {"SET": "value", "EMPTY": ""}

@pytest.mark.parametrize("template,expected", [
    ("${SET}", "value"),
    ("prefix-${SET}-suffix", "prefix-value-suffix"),
    ("${UNSET:-fallback}", "fallback"),
    ("${EMPTY:-fallback}", "fallback"),
    ("${EMPTY-fallback}", ""),
    ("${UNSET-fallback}", "fallback"),
    ("${SET:?required}", "value"),
    ("cost: $$5", "cost: $5"),
    ("no placeholders", "no placeholders"),
])
def test_interpolate(template, expected):
    assert EnvironmentInterpolator.interpolate(template, CONTEXT) == expected

def test_unset_variable_raises():
    with pytest.raises(InterpolationError, match="UNSET"):
        EnvironmentInterpolator.interpolate("${UNSET}", CONTEXT)

def test_required_variable_message():
    with pytest.raises(InterpolationError, match="registry must be set"):
        EnvironmentInterpolator.interpolate("${EMPTY:?registry must be set}", CONTEXT)
