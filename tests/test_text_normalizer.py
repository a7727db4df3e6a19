from services.text_normalizer import normalize_digits_and_spaces


def test_arabic_indic_digits_become_ascii():
    line = "١٩/٧/٢٠٢٥, ٩:٤٦"
    assert normalize_digits_and_spaces(line) == "19/7/2025, 9:46"


def test_extended_arabic_indic_digits_become_ascii():
    assert normalize_digits_and_spaces("۱۲:۳۰") == "12:30"


def test_special_spaces_collapse_to_plain_space():
    assert normalize_digits_and_spaces("a\u00a0b\u2007c\u2060d") == "a b c d"


def test_whitespace_before_meridiem_is_single_space():
    assert normalize_digits_and_spaces("9:46\u202fam") == "9:46 am"
    assert normalize_digits_and_spaces("9:46 \u202f P.M. - Bob: x") == "9:46 P.M. - Bob: x"


def test_empty_and_plain_text_unchanged():
    assert normalize_digits_and_spaces("") == ""
    assert normalize_digits_and_spaces("hello world") == "hello world"
