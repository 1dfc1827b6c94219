import pytest

from automaton import Automaton
from io_utils import RecordParser

SAMPLE_RECORDS = """
1:X:q0,q1
2:X:a,b
3:X:q0
4:X:q1
5:X:q0,a,q1;q0,b,q0;q1,a,q1;q1,b,q0

6:G:S,A
7:G:a,b
8:G:S
9:G:S->aA;A->bS;A->ε
"""


@pytest.fixture
def sample_records():
    return SAMPLE_RECORDS


@pytest.fixture
def parser():
    return RecordParser()


@pytest.fixture
def ends_in_a():
    """Complete DFA over {a, b} accepting words ending in 'a'."""
    aut = Automaton("X")
    aut.set_states(["q0", "q1"])
    aut.set_alphabet(["a", "b"])
    aut.set_initial_state("q0")
    aut.set_final_states(["q1"])
    aut.set_transitions("q0,a,q1;q0,b,q0;q1,a,q1;q1,b,q0")
    return aut
