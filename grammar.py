from typing_extensions import *

import structlog

from automaton import Automaton, ValidationResult
from errors import FormatError, ModelReferenceError

log = structlog.get_logger(__name__)

# Shape of a classified right-hand side: (kind, terminal, non-terminal)
Classification = Tuple[str, Optional[str], Optional[str]]


class RegularGrammar:
    """
    Right-linear regular grammar.

    Productions are stored as raw right-hand-side strings per non-terminal,
    in insertion order (display only). Whether a right-hand side has one of
    the regular shapes

        A -> ε      A -> a      A -> aB

    is checked by validate(), not when the production is added.
    """

    EPSILON = "ε"
    FINAL_STATE = "qf"

    def __init__(self, name: str):
        self.name = name
        self.non_terminals: Set[str] = set()
        self.terminals: Set[str] = set()
        self.start_symbol: Optional[str] = None
        self.productions: Dict[str, List[str]] = {}

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    def set_non_terminals(self, symbols: Iterable[str]):
        self.non_terminals = {symbol.strip() for symbol in symbols}

    def set_terminals(self, symbols: Iterable[str]):
        self.terminals = {symbol.strip() for symbol in symbols}

    def set_start_symbol(self, symbol: str):
        symbol = symbol.strip()
        if symbol not in self.non_terminals:
            raise ModelReferenceError(
                f"Unknown non-terminal '{symbol}': start symbol must be a non-terminal"
            )
        self.start_symbol = symbol

    def add_production(self, lhs: str, rhs: str):
        lhs, rhs = lhs.strip(), rhs.strip()
        if lhs not in self.non_terminals:
            raise ModelReferenceError(f"Unknown non-terminal '{lhs}'")
        self.productions.setdefault(lhs, []).append(rhs)

    def set_productions(self, text: str):
        """Add productions from 'A->aB;A->a;B->ε'."""
        for piece in text.split(";"):
            parts = piece.split("->")
            if len(parts) != 2:
                raise FormatError(
                    f"Invalid production '{piece.strip()}': expected 'A->aB' or 'A->a'"
                )
            self.add_production(*parts)

    # ------------------------------------------------------------------ #
    # Introspection / pretty-printing
    # ------------------------------------------------------------------ #

    def iter_productions(self) -> Iterator[Tuple[str, str]]:
        for lhs, rhs_list in self.productions.items():
            for rhs in rhs_list:
                yield lhs, rhs

    def classify(self, rhs: str) -> Optional[Classification]:
        """
        Return ("epsilon", None, None), ("terminal", a, None) or
        ("step", a, B) for a regular right-hand side, None otherwise.

        Symbols may be longer than one character (DFA state names such as
        q1); a right-hand side is a step when it splits into a known
        terminal followed by a known non-terminal.
        """
        if rhs in (self.EPSILON, ""):
            return ("epsilon", None, None)
        if rhs in self.terminals:
            return ("terminal", rhs, None)
        for i in range(1, len(rhs)):
            terminal, non_terminal = rhs[:i], rhs[i:]
            if terminal in self.terminals and non_terminal in self.non_terminals:
                return ("step", terminal, non_terminal)
        return None

    def get_info(self) -> Dict[str, Any]:
        productions = [f"{lhs} -> {rhs}" for lhs, rhs in self.iter_productions()]
        return {
            "name": self.name,
            "nonTerminals": sorted(self.non_terminals),
            "terminals": sorted(self.terminals),
            "startSymbol": self.start_symbol,
            "productions": productions,
            "productionsCount": len(productions),
        }

    def __str__(self):
        result = f"Regular grammar {self.name}\n"
        result += f"  Non-terminals: {{{', '.join(sorted(self.non_terminals))}}}\n"
        result += f"  Terminals: {{{', '.join(sorted(self.terminals))}}}\n"
        result += f"  Start symbol: {self.start_symbol}\n"
        result += "  Productions:\n"
        for lhs, rhs_list in self.productions.items():
            result += f"    {lhs} -> {' | '.join(rhs_list)}\n"
        return result

    def __eq__(self, other):
        if not isinstance(other, RegularGrammar):
            return NotImplemented
        return (
            self.non_terminals == other.non_terminals
            and self.terminals == other.terminals
            and self.start_symbol == other.start_symbol
            and {k: sorted(v) for k, v in self.productions.items()}
            == {k: sorted(v) for k, v in other.productions.items()}
        )

    __hash__ = None

    def validate(self) -> ValidationResult:
        """
        Check that the grammar is complete and every production is regular.

        A right-hand side is regular when classify() accepts it. Symbols
        are matched against the declared sets rather than by length, so
        with a multi-character non-terminal such as q1 (or bc) both
        A -> aq1 and A -> abc count as A -> aB. With single-character
        symbols this is the usual rule of at most two symbols.
        """
        result = ValidationResult()

        if not self.non_terminals:
            result.errors.append("No non-terminals defined")
        if not self.terminals:
            result.errors.append("No terminals defined")
        if self.start_symbol is None:
            result.errors.append("No start symbol defined")
        if not self.productions:
            result.errors.append("No productions defined")

        for lhs, rhs in self.iter_productions():
            if self.classify(rhs) is None:
                result.errors.append(
                    f"Production '{lhs} -> {rhs}' is not right-linear regular"
                )

        return result

    # ------------------------------------------------------------------ #
    # Conversion
    # ------------------------------------------------------------------ #

    def _final_state_name(self) -> str:
        name = self.FINAL_STATE
        while name in self.non_terminals:
            name += "'"
        return name

    def to_finite_automaton(self, name: Optional[str] = None) -> Automaton:
        """
        Build the automaton accepting the language of this grammar.

        States are the non-terminals plus one extra final state qf:

            A -> aB     A --a--> B
            A -> a      A --a--> qf
            A -> ε      A is final

        Other right-hand sides add nothing. When A -> aB and A -> a are
        both present (as DFA -> grammar produces for final targets) the
        edge goes to a final twin "B+qf" of B that copies B's edges, so
        the result stays deterministic. Like qf, a twin name that is
        already a non-terminal gets ' appended until it is free. Two different non-terminals
        behind the same A, a overwrite each other like any repeated
        transition.
        """
        final_state = self._final_state_name()

        final_states = [final_state]
        targets: Dict[Tuple[str, str], List[str]] = {}
        for lhs, rhs in self.iter_productions():
            shape = self.classify(rhs)
            if shape is None:
                continue
            kind, terminal, non_terminal = shape
            if kind == "epsilon":
                final_states.append(lhs)
                continue
            dst = final_state if kind == "terminal" else non_terminal
            dsts = targets.setdefault((lhs, terminal), [])
            if dst not in dsts:
                dsts.append(dst)

        twins: Dict[str, str] = {}
        taken = set(self.non_terminals) | {final_state}
        for dsts in targets.values():
            steps = [dst for dst in dsts if dst != final_state]
            if steps and final_state in dsts and steps[-1] not in twins:
                twin = f"{steps[-1]}+{final_state}"
                while twin in taken:
                    twin += "'"
                taken.add(twin)
                twins[steps[-1]] = twin

        def effective(dsts: List[str]) -> List[str]:
            steps = [dst for dst in dsts if dst != final_state]
            if not steps:
                return dsts
            if final_state in dsts:
                steps[-1] = twins[steps[-1]]
            return steps

        automaton = Automaton(name or f"{self.name}_dfa")
        automaton.set_states(
            list(self.non_terminals) + [final_state] + list(twins.values())
        )
        automaton.set_alphabet(self.terminals)
        automaton.set_initial_state(self.start_symbol or "")

        for (lhs, terminal), dsts in targets.items():
            for dst in effective(dsts):
                automaton.add_transition(lhs, terminal, dst)
            if lhs in twins:
                for dst in effective(dsts):
                    automaton.add_transition(twins[lhs], terminal, dst)

        automaton.set_final_states(final_states + list(twins.values()))

        log.debug(
            "grammar_converted",
            source=self.name,
            target=automaton.name,
            states=len(automaton.states),
            transitions=len(automaton.transitions),
        )
        return automaton
