import pytest

from errors import FormatError, ModelReferenceError
from grammar import RegularGrammar


def make_grammar(productions="S->aA;A->bS;A->ε", name="G"):
    g = RegularGrammar(name)
    g.set_non_terminals(["S", "A", "B"])
    g.set_terminals(["a", "b", "c"])
    g.set_start_symbol("S")
    if productions:
        g.set_productions(productions)
    return g


# --- Construction ---
def test_setters_trim():
    g = RegularGrammar("G")
    g.set_non_terminals([" S", "A "])
    g.set_terminals(["a ", " b"])
    g.set_start_symbol(" S ")
    assert g.non_terminals == {"S", "A"}
    assert g.terminals == {"a", "b"}
    assert g.start_symbol == "S"


def test_unknown_start_symbol():
    g = RegularGrammar("G")
    g.set_non_terminals(["S"])
    with pytest.raises(ModelReferenceError):
        g.set_start_symbol("X")


def test_unknown_left_side():
    g = make_grammar(productions=None)
    with pytest.raises(ModelReferenceError, match="'X'"):
        g.add_production("X", "a")


def test_add_production_keeps_malformed_right_side():
    g = make_grammar(productions=None)
    g.add_production("S", " abc ")
    assert g.productions == {"S": ["abc"]}


@pytest.mark.parametrize("text", ["S-aA", "S->a->A", "S->aA;"])
def test_set_productions_format(text):
    g = make_grammar(productions=None)
    with pytest.raises(FormatError, match="Invalid production"):
        g.set_productions(text)


# --- Validation ---
@pytest.mark.parametrize("rhs", ["ε", "", "a", "aB", "cS"])
def test_regular_right_sides(rhs):
    g = make_grammar(productions=None)
    g.add_production("A", rhs)
    assert g.validate().is_valid, rhs


@pytest.mark.parametrize("rhs", ["abc", "d", "aa", "Ba", "aBa", "B"])
def test_non_regular_right_sides(rhs):
    g = make_grammar(productions=None)
    g.add_production("A", rhs)

    result = g.validate()
    assert result.is_valid is False
    assert result.errors == [f"Production 'A -> {rhs}' is not right-linear regular"]


def test_validate_empty_grammar():
    result = RegularGrammar("G").validate()
    assert result.to_dict() == {
        "isValid": False,
        "errors": [
            "No non-terminals defined",
            "No terminals defined",
            "No start symbol defined",
            "No productions defined",
        ],
        "warnings": [],
    }


def test_classify_multi_character_symbols():
    g = RegularGrammar("G")
    g.set_non_terminals(["q0", "q1"])
    g.set_terminals(["a", "b"])

    assert g.classify("aq1") == ("step", "a", "q1")
    assert g.classify("b") == ("terminal", "b", None)
    assert g.classify("ε") == ("epsilon", None, None)
    assert g.classify("aq2") is None
    assert g.classify("abq1") is None


def test_get_info_keeps_insertion_order():
    g = make_grammar("S->aA;A->ε;A->bS")
    info = g.get_info()

    assert info["name"] == "G"
    assert info["nonTerminals"] == ["A", "B", "S"]
    assert info["terminals"] == ["a", "b", "c"]
    assert info["startSymbol"] == "S"
    assert info["productions"] == ["S -> aA", "A -> ε", "A -> bS"]
    assert info["productionsCount"] == 3


def test_production_order_is_display_only():
    first = make_grammar("S->aA;A->ε;A->bS")
    second = make_grammar("A->bS;S->aA;A->ε")

    assert first.get_info()["productions"] != second.get_info()["productions"]
    assert first == second

    words = ["", "a", "ab", "aba", "ababa", "b", "aa"]
    dfa_1 = first.to_finite_automaton()
    dfa_2 = second.to_finite_automaton()
    assert [dfa_1.accepts(w) for w in words] == [dfa_2.accepts(w) for w in words]


def test_str_lists_productions():
    text = str(make_grammar())
    assert "Start symbol: S" in text
    assert "A -> bS | ε" in text


# --- Conversion to automaton ---
def test_to_finite_automaton_structure():
    g = make_grammar("S->aA;A->bS;A->ε;B->c;S->abc")
    dfa = g.to_finite_automaton()

    assert dfa.name == "G_dfa"
    assert dfa.states == {"S", "A", "B", "qf"}
    assert dfa.alphabet == {"a", "b", "c"}
    assert dfa.initial_state == "S"
    assert dfa.final_states == {"qf", "A"}
    assert dfa.transitions == {
        ("S", "a"): "A",
        ("A", "b"): "S",
        ("B", "c"): "qf",
    }


def test_to_finite_automaton_language():
    dfa = make_grammar().to_finite_automaton("L")

    assert dfa.name == "L"
    for word in ["a", "aba", "ababa"]:
        assert dfa.accepts(word), word
    for word in ["", "ab", "b", "aa", "abab"]:
        assert not dfa.accepts(word), word


def test_synthetic_final_state_avoids_collision():
    g = RegularGrammar("G")
    g.set_non_terminals(["S", "qf"])
    g.set_terminals(["a"])
    g.set_start_symbol("S")
    g.set_productions("S->a")

    dfa = g.to_finite_automaton()
    assert dfa.states == {"S", "qf", "qf'"}
    assert dfa.get_transition("S", "a") == "qf'"
    assert dfa.final_states == {"qf'"}


def test_terminal_and_step_on_same_symbol_get_a_final_twin():
    # L = {a, ab}
    g = RegularGrammar("G")
    g.set_non_terminals(["S", "B"])
    g.set_terminals(["a", "b"])
    g.set_start_symbol("S")
    g.set_productions("S->aB;S->a;B->b")

    dfa = g.to_finite_automaton()
    assert dfa.get_transition("S", "a") == "B+qf"
    assert "B+qf" in dfa.final_states
    assert dfa.get_transition("B+qf", "b") == "qf"

    assert dfa.accepts("a")
    assert dfa.accepts("ab")
    assert not dfa.accepts("")
    assert not dfa.accepts("abb")
    assert dfa.validate().is_valid


def test_conversion_without_start_symbol_propagates():
    g = RegularGrammar("G")
    g.set_non_terminals(["S"])
    g.set_terminals(["a"])
    with pytest.raises(ModelReferenceError):
        g.to_finite_automaton()


def test_final_twin_avoids_collision():
    g = RegularGrammar("G")
    g.set_non_terminals(["S", "B", "B+qf"])
    g.set_terminals(["a", "b"])
    g.set_start_symbol("S")
    g.set_productions("S->aB;S->a;B->bS;B+qf->aS")

    dfa = g.to_finite_automaton()
    assert dfa.states == {"S", "B", "B+qf", "qf", "B+qf'"}
    assert dfa.final_states == {"qf", "B+qf'"}
    assert dfa.get_transition("S", "a") == "B+qf'"
    assert dfa.get_transition("B+qf'", "b") == "S"
    assert dfa.get_transition("B+qf", "a") == "S"
    assert "B+qf" not in dfa.final_states

    # language is (ab)*a
    for word in ["a", "aba", "ababa"]:
        assert dfa.accepts(word), word
    for word in ["", "aaa", "ab", "aa", "abab"]:
        assert not dfa.accepts(word), word


def test_multi_character_non_terminal_counts_as_step():
    g = RegularGrammar("G")
    g.set_non_terminals(["A", "bc"])
    g.set_terminals(["a", "b", "c"])
    g.set_start_symbol("A")
    g.set_productions("A->abc")

    assert g.classify("abc") == ("step", "a", "bc")
    assert g.validate().is_valid

    g.set_non_terminals(["A"])
    assert not g.validate().is_valid
