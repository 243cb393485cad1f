"""Validator set derivation from the candidate list."""
from xdcadapter.testing.mock_chain import make_address
from xdcadapter.validator_set import MAX_VALIDATORS, is_validator, resolve_validator_set


def test_validator_set_bounded():
    for count in (0, 1, 107, 108, 109, 250):
        candidates = [make_address(i + 1) for i in range(count)]
        validator_set = resolve_validator_set(candidates)
        assert len(validator_set) == min(count, MAX_VALIDATORS)
        # Positional prefix of the input, order kept
        assert validator_set == candidates[0:MAX_VALIDATORS]


def test_validator_set_normalises_format():
    candidates = ["0x" + "a" * 40, "XDC" + "B" * 40]
    assert resolve_validator_set(candidates) == ["xdc" + "a" * 40, "xdc" + "b" * 40]


def test_is_validator():
    candidates = [make_address(i + 1) for i in range(110)]
    assert is_validator(make_address(1), candidates)
    assert is_validator(make_address(108), candidates)
    assert not is_validator(make_address(109), candidates)
    assert not is_validator(make_address(999), candidates)


def test_is_validator_any_format():
    candidates = [make_address(1)]
    assert is_validator("0x" + make_address(1)[3:], candidates)


def test_custom_max_validators():
    candidates = [make_address(i + 1) for i in range(5)]
    assert len(resolve_validator_set(candidates, max_validators=3)) == 3
    assert not is_validator(make_address(4), candidates, max_validators=3)
