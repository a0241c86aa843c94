import keyword

import pytest

from declerr.members import ContainerKind, Member, unraw


@pytest.mark.parametrize("name", ["class", "fn", "source", "type"])
def test_unraw_strips_single_escape_underscore(name):
    assert unraw(name + "_") == name


@pytest.mark.parametrize("name", ["msg", "_", "__", "x__", "__init__", "id"])
def test_unraw_leaves_unescaped_names(name):
    assert unraw(name) == name


def test_unraw_is_idempotent_on_plain_names():
    for name in ["source", "destination", "thing"]:
        assert unraw(unraw(name)) == unraw(name)


def test_container_kind_display_names():
    kind = ContainerKind(ContainerKind.TUPLE_STRUCT.value)
    assert kind is ContainerKind.TUPLE_STRUCT
    assert str(kind) == "tuple struct"
    assert str(ContainerKind(ContainerKind.STRUCT.value)) == "struct"
    assert str(ContainerKind(ContainerKind.UNIT_VARIANT.value)) == "unit variant"
    assert len({str(kind) for kind in ContainerKind}) == len(ContainerKind)


def test_named_member_str_is_unescaped():
    assert str(Member("fn_")) == "fn"
    assert str(Member("msg")) == "msg"


def test_unnamed_member_str_is_index():
    assert str(Member(3)) == str(3)


def test_member_equality_ignores_escape():
    assert Member("source_") == Member("source")
    assert hash(Member("source_")) == hash(Member("source"))
    assert Member("source_").key == "source_"


def test_named_and_unnamed_members_differ():
    assert Member("a") != Member(0)
    assert Member(0) == Member(0)
    assert Member(0) != Member(1)


def test_members_work_as_dict_keys():
    index = {Member("a"): 0, Member(1): 1}
    assert index[Member("a_")] == 0
    assert index[Member(1)] == 1


def test_member_is_not_equal_to_plain_string():
    assert (Member("source") == "source") is False


def test_local_name_of_unnamed_member():
    for i in range(3):
        assert Member(i).local_name() == f"_{i}"


def test_local_name_escapes_keywords_again():
    for kw in ["class", "lambda", "def"]:
        local = Member(kw + "_").local_name()
        assert local == kw + "_"
        assert not keyword.iskeyword(local)
        assert local.isidentifier()


def test_local_name_of_plain_name_is_unescaped():
    assert Member("source_").local_name() == "source"
    assert Member("msg").local_name() == "msg"


def test_named_property():
    assert Member("x").named
    assert not Member(0).named


@pytest.mark.parametrize("bad", [-1])
def test_negative_index_rejected(bad):
    with pytest.raises(ValueError):
        Member(bad)


@pytest.mark.parametrize("bad", ["1abc", "a-b", ""])
def test_invalid_name_rejected(bad):
    with pytest.raises(ValueError):
        Member(bad)


@pytest.mark.parametrize("bad", [True, 1.5, None])
def test_wrong_type_rejected(bad):
    with pytest.raises(TypeError):
        Member(bad)