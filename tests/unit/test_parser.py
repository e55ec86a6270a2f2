import io
import sys
from dataclasses import dataclass, field
from typing import List

import pytest

import recordjson as rj
from recordjson.properties import to_float32


@dataclass
class Seed:
    radius: float = 0.0

    @staticmethod
    def json_properties():
        return (rj.property_("radius", rj.Float32),)


@dataclass
class Apple:
    color: str = ""
    size: int = 0
    seed: Seed = field(default_factory=Seed)

    @staticmethod
    def json_properties():
        return (
            rj.property_("color", str),
            rj.property_("seed", Seed),
            rj.property_("size", int),
        )


@dataclass
class AppleTree:
    id: str = ""
    apples: List[Apple] = field(default_factory=list)

    @staticmethod
    def json_properties():
        return (
            rj.property_("apples", List[Apple]),
            rj.property_("id", str),
        )


@dataclass
class Orchard:
    trees: List[AppleTree] = field(default_factory=list)

    @staticmethod
    def json_properties():
        return (rj.property_("trees", List[AppleTree]),)


@dataclass
class Numbers:
    ns: List[int] = field(default_factory=list)

    @staticmethod
    def json_properties():
        return (rj.property_("numbers", List[int], attr="ns"),)


@dataclass
class Point:
    x: int = 0
    y: int = 0

    @staticmethod
    def json_properties():
        return (rj.property_("x", int), rj.property_("y", int))


@dataclass
class Measure:
    count: int = 0
    ratio: float = 0.0

    @staticmethod
    def json_properties():
        return (rj.property_("count", rj.Unsigned), rj.property_("ratio", float))


@dataclass
class Node:
    children: list = field(default_factory=list)

    @staticmethod
    def json_properties():
        return (rj.property_("children", List[Node]),)


FIVE_APPLES = (
    '{"apples": ['
    '{"color":"red","size":0,"seed":{"radius":0}},'
    '{"color":"red","size":1,"seed":{"radius":1}},'
    '{"color":"red","size":2,"seed":{"radius":2}},'
    '{"color":"red","size":3,"seed":{"radius":3}},'
    '{"color":"red","size":4,"seed":{"radius":4}}'
    ']}'
)


def test_reads_json_into_record():
    txt = '     {"color":"red","size": -25\n, "seed":   {"radius":        -3.14}}'
    apple = rj.parse(Apple, txt)
    assert apple.color == "red"
    assert apple.size == -25
    assert apple.seed.radius == to_float32(-3.14)
    assert apple.seed.radius == pytest.approx(-3.14)


def test_whitespace_between_tokens_is_ignored():
    compact = '{"color":"red","seed":{"radius":1.5},"size":3}'
    spaced = ' \n{ \t"color" :\n "red" ,\r\n "seed" : { "radius" : 1.5 } ,\t"size":\n3 \n}\n '
    assert rj.parse(Apple, spaced) == rj.parse(Apple, compact)


def test_reads_escaped_quotes_with_trailing_comma():
    apple = rj.parse(Apple, r'{"color":"\"red\"",}')
    assert apple.color == '"red"'


def test_trailing_comma_in_object_is_accepted():
    assert rj.parse(Apple, '{"color":"red","size":-25,}') == rj.parse(Apple, '{"color":"red","size":-25}')


def test_trailing_comma_in_array_is_accepted():
    assert rj.parse(Numbers, '{"numbers":[1,2,]}').ns == [1, 2]
    assert rj.parse(Numbers, '{"numbers":[1, 2 , ]}').ns == [1, 2]


def test_empty_array_and_object():
    assert rj.parse(Numbers, '{"numbers":[]}').ns == []
    assert rj.parse(Numbers, '{"numbers":[ ]}').ns == []
    assert rj.parse(Apple, "{}") == Apple()


@pytest.mark.parametrize("txt", [
    '{asd "color": "red","size": -25\n}',
    '{"color"asd: "red","size": -25\n}',
    '{"color": "red","size": -2asd5\n}',
    '{"color": red}',
    '{"color": "red"; "size": 1}',
    '["color"]',
])
def test_invalid_json_raises_parse_error(txt):
    with pytest.raises(rj.ParseError):
        rj.parse(Apple, txt)


def test_reads_list_of_records_in_order():
    tree = rj.parse(AppleTree, FIVE_APPLES)
    assert len(tree.apples) == 5
    for i, apple in enumerate(tree.apples):
        assert apple.color == "red"
        assert apple.size == i
        assert apple.seed.radius == float(i)


def test_reads_list_of_records_holding_lists():
    txt = (
        '{'
        '"trees":['
        '  {"id":"tree1","apples": ['
        '      {"color":"red","size":0,"seed":{"radius":0}},'
        '      {"color":"red","size":1,"seed":{"radius":1}}'
        '  ]},'
        '  {"id":"tree2","apples": ['
        '      {"color":"red","size":0,"seed":{"radius":0}}'
        '  ]}'
        ' ]'
        '}'
    )
    orchard = rj.parse(Orchard, txt)
    assert [t.id for t in orchard.trees] == ["tree1", "tree2"]
    assert [len(t.apples) for t in orchard.trees] == [2, 1]


@pytest.mark.parametrize("txt", [
    '{"color": "red","size": -25\n, "fakeproperty": "asd"}',
    '{"fakeproperty": "asd", "color": "red"}',
])
def test_unknown_property_is_rejected(txt):
    with pytest.raises(rj.UnexpectedPropertyName) as ei:
        rj.parse(Apple, txt)
    assert ei.value.name == "fakeproperty"
    assert ei.value.record_type is Apple
    assert "unexpected property name 'fakeproperty' for Apple" in str(ei.value)


def test_unknown_property_in_nested_record_is_rejected():
    with pytest.raises(rj.UnexpectedPropertyName) as ei:
        rj.parse(Apple, '{"seed": {"radius": 1, "weight": 2}}')
    assert ei.value.record_type is Seed


def test_unknown_property_is_a_parse_error():
    with pytest.raises(rj.ParseError):
        rj.parse(Apple, '{"nope": 1}')


def test_missing_comma_in_list():
    with pytest.raises(rj.ParseError) as ei:
        rj.parse(Numbers, '{"numbers":[1 2 3 4]}')
    assert "unexpected character '2'" in str(ei.value)


def test_missing_comma_in_object():
    with pytest.raises(rj.ParseError):
        rj.parse(Point, '{"x": 1 "y": 2}')


def test_truncated_input_signals_end_of_input():
    txt = '{"color":"r\\"ed","size":-25,"seed":{"radius":-3.14}}'
    for cut in range(len(txt)):
        with pytest.raises(rj.UnexpectedEndOfInput):
            rj.parse(Apple, txt[:cut])


def test_truncated_array_signals_end_of_input():
    with pytest.raises(rj.UnexpectedEndOfInput) as ei:
        rj.parse(Numbers, '{"numbers":[1,2')
    assert "unexpected end of input" in str(ei.value)


def test_missing_keys_keep_defaults():
    apple = rj.parse(Apple, '{"size": 7}')
    assert apple == Apple(size=7)


def test_repeated_key_keeps_last_value():
    assert rj.parse(Point, '{"x": 1, "x": 2}').x == 2


def test_signed_integer_requires_digit_after_sign():
    with pytest.raises(rj.UnexpectedCharacter):
        rj.parse(Point, '{"x": -}')
    with pytest.raises(rj.UnexpectedCharacter):
        rj.parse(Point, '{"x": - 1}')
    with pytest.raises(rj.UnexpectedCharacter):
        rj.parse(Point, '{"x": +1}')


def test_unsigned_rejects_sign():
    assert rj.parse(Measure, '{"count": 42}').count == 42
    with pytest.raises(rj.UnexpectedCharacter):
        rj.parse(Measure, '{"count": -1}')


def test_unsigned_requires_digits():
    with pytest.raises(rj.UnexpectedCharacter):
        rj.parse(Measure, '{"count": ""}')


@pytest.mark.parametrize("txt, expected", [
    ("0", 0.0),
    ("-25", -25.0),
    ("0.5", 0.5),
    (".5", 0.5),
    ("2.5e3", 2500.0),
    ("1E-07", 1e-07),
    ("-1e+16", -1e16),
])
def test_double_grammar(txt, expected):
    assert rj.parse(Measure, '{"ratio": %s}' % txt).ratio == expected


def test_double_with_two_points_is_a_conversion_error():
    with pytest.raises(rj.ParseError) as ei:
        rj.parse(Measure, '{"ratio": 1.2.3}')
    assert "invalid number '1.2.3'" in str(ei.value)


def test_float32_out_of_range():
    with pytest.raises(rj.ParseError) as ei:
        rj.parse(Seed, '{"radius": 1e300}')
    assert "out of range for single precision" in str(ei.value)


def test_extra_data_after_root_value():
    with pytest.raises(rj.ParseError) as ei:
        rj.parse(Point, '{"x": 1} 2')
    assert "extra data after root value at offset 9" in str(ei.value)


def test_parse_within_range():
    txt = 'xx{"color":"red"}yy'
    assert rj.parse(Apple, txt, 2, 17).color == "red"


def test_parse_stream():
    tree = rj.parse_stream(AppleTree, io.StringIO(FIVE_APPLES))
    assert len(tree.apples) == 5


def test_depth_limit():
    nested = '{"children":[' * 3 + '{"children":[]}' + ']}' * 3
    root = rj.parse(Node, nested)
    assert len(root.children[0].children[0].children) == 1
    with pytest.raises(rj.ParseError) as ei:
        rj.parse(Node, nested, max_depth=4)
    assert "depth limit 4 exceeded" in str(ei.value)

    deep = '{"children":[' * 20 + '{"children":[]}' + ']}' * 20
    with pytest.raises(rj.ParseError):
        rj.parse(Node, deep)


def test_non_record_type_rejected_before_reading():
    with pytest.raises(TypeError):
        rj.parse(dict, "not json at all")


def test_double_overflow_is_rejected():
    with pytest.raises(rj.ParseError) as ei:
        rj.parse(Measure, '{"ratio": 1e400}')
    assert "out of range" in str(ei.value)


needs_int_digit_limit = pytest.mark.skipif(
    not getattr(sys, "get_int_max_str_digits", lambda: 0)(),
    reason="interpreter has no integer string conversion limit",
)


@needs_int_digit_limit
def test_oversized_integer_is_a_parse_error():
    digits = "1" * (sys.get_int_max_str_digits() + 1)
    with pytest.raises(rj.ParseError) as ei:
        rj.parse(Point, '{"x": -%s}' % digits)
    assert "invalid number" in str(ei.value)
    assert "at offset 6" in str(ei.value)
    with pytest.raises(rj.ParseError):
        rj.parse(Measure, '{"count": %s}' % digits)


def test_parse_stream_checks_record_type_once(monkeypatch):
    calls = []
    real_check = rj.check_record_type

    def counting_check(cls):
        calls.append(cls)
        real_check(cls)

    monkeypatch.setattr("recordjson.parser.check_record_type", counting_check)
    rj.parse_stream(AppleTree, io.StringIO(FIVE_APPLES))
    assert calls == [AppleTree]


def test_parse_stream_rejects_non_record_type():
    with pytest.raises(TypeError):
        rj.parse_stream(dict, io.StringIO("{}"))
