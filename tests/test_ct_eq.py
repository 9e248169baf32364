from attestor.utils.ct import ct_eq


def test_ct_eq_basic():
    assert ct_eq(b'abc', b'abc') is True
    assert ct_eq(b'abc', b'abd') is False
    assert ct_eq(b'abc', b'abcd') is False


def test_ct_eq_strings():
    assert ct_eq("deadbeef", "deadbeef") is True
    assert ct_eq("deadbeef", b"deadbeef") is True
    assert ct_eq("deadbeef", "deadbeee") is False
    assert ct_eq("déadbeef", "deadbeef") is False
