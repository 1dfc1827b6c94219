from dataclasses import dataclass, field
from typing_extensions import *

import structlog
from graphviz import Digraph

from errors import DeterminismError, FormatError, ModelReferenceError, NotInitializedError
from logging_config import configure_defaults

configure_defaults()
log = structlog.get_logger(__name__)


def split_list(text: str, separator: str = ",") -> List[str]:
    """Split a record payload on `separator` and trim every piece."""
    return [piece.strip() for piece in text.split(separator)]


# -----------------------------------------------------------------------------
# Result values
# -----------------------------------------------------------------------------


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class TraceStep:
    """One visited state; `symbol` is what was consumed to get there."""

    state: str
    symbol: Optional[str]
    step: int

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.state, "symbol": self.symbol, "step": self.step}


@dataclass
class RecognitionResult:
    word: str
    accepted: bool = False
    path: List[TraceStep] = field(default_factory=list)
    error: Optional[str] = None
    final_state: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "accepted": self.accepted,
            "path": [step.to_dict() for step in self.path],
            "error": self.error,
            "finalState": self.final_state,
        }


@dataclass
class Automaton:
    """
    Deterministic finite automaton.

    Built incrementally: every setter checks its arguments against the
    states/alphabet in place at call time, so transitions can only be
    added once both are set.

    transitions maps (state, symbol) -> state, which keeps at most one
    target per pair. Re-adding a pair overwrites it and logs a
    `transition_overwrite` warning, or raises DeterminismError when the
    automaton is strict.
    """

    name: str
    states: Set[str] = field(default_factory=set)
    alphabet: Set[str] = field(default_factory=set)
    initial_state: Optional[str] = None
    final_states: Set[str] = field(default_factory=set)
    transitions: Dict[Tuple[str, str], str] = field(default_factory=dict)
    strict: bool = False

    # Recognition state, replaced on every reset()
    current_state: Optional[str] = field(default=None, repr=False, compare=False)
    execution_path: List[TraceStep] = field(
        default_factory=list, repr=False, compare=False
    )

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def set_states(self, names: Iterable[str]) -> None:
        self.states = {name.strip() for name in names}

    def set_alphabet(self, symbols: Iterable[str]) -> None:
        self.alphabet = {symbol.strip() for symbol in symbols}

    def set_initial_state(self, name: str) -> None:
        state = name.strip()
        if state not in self.states:
            raise ModelReferenceError(
                f"Unknown state '{state}': initial state must be one of the states"
            )
        self.initial_state = state

    def set_final_states(self, names: Iterable[str]) -> None:
        final_states = set()
        for name in names:
            state = name.strip()
            if state not in self.states:
                raise ModelReferenceError(
                    f"Unknown state '{state}': final states must be among the states"
                )
            final_states.add(state)
        self.final_states = final_states

    def add_transition(self, src: str, symbol: str, dst: str) -> None:
        src, symbol, dst = src.strip(), symbol.strip(), dst.strip()

        if src not in self.states:
            raise ModelReferenceError(f"Unknown source state '{src}'")
        if dst not in self.states:
            raise ModelReferenceError(f"Unknown target state '{dst}'")
        if symbol not in self.alphabet:
            raise ModelReferenceError(f"Unknown symbol '{symbol}': not in the alphabet")

        previous = self.transitions.get((src, symbol))
        if previous is not None:
            if self.strict:
                raise DeterminismError(
                    f"Transition ({src}, {symbol}) already goes to '{previous}'"
                )
            log.warning(
                "transition_overwrite",
                automaton=self.name,
                state=src,
                symbol=symbol,
                previous=previous,
                target=dst,
            )

        self.transitions[(src, symbol)] = dst

    def set_transitions(self, text: str) -> None:
        """Add transitions from 'from,symbol,to;from,symbol,to;...'."""
        for piece in text.split(";"):
            parts = split_list(piece)
            if len(parts) != 3:
                raise FormatError(
                    f"Invalid transition '{piece.strip()}': expected 'state,symbol,state'"
                )
            self.add_transition(*parts)

    # -------------------------------------------------------------------------
    # Structural queries
    # -------------------------------------------------------------------------

    def get_transition(self, state: str, symbol: str) -> Optional[str]:
        return self.transitions.get((state, symbol))

    def transitions_list(self) -> List[Dict[str, str]]:
        return [
            {"from": src, "symbol": symbol, "to": dst}
            for (src, symbol), dst in sorted(self.transitions.items())
        ]

    def missing_transitions(self) -> List[Tuple[str, str]]:
        """(state, symbol) pairs without a target."""
        return [
            (state, symbol)
            for state in sorted(self.states)
            for symbol in sorted(self.alphabet)
            if (state, symbol) not in self.transitions
        ]

    def is_complete(self) -> bool:
        return not self.missing_transitions()

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "states": sorted(self.states),
            "alphabet": sorted(self.alphabet),
            "initialState": self.initial_state,
            "finalStates": sorted(self.final_states),
            "transitionsCount": len(self.transitions),
            "transitions": self.transitions_list(),
        }

    def validate(self) -> ValidationResult:
        result = ValidationResult()

        if not self.states:
            result.errors.append("No states defined")
        if not self.alphabet:
            result.errors.append("No alphabet defined")
        if self.initial_state is None:
            result.errors.append("No initial state defined")

        if not self.final_states:
            result.warnings.append("No final states defined")

        missing = len(self.missing_transitions())
        if missing:
            result.warnings.append(
                f"{missing} transitions missing for the automaton to be complete"
            )

        return result

    # -------------------------------------------------------------------------
    # Recognition
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        self.current_state = self.initial_state
        self.execution_path = []
        if self.current_state is not None:
            self.execution_path.append(TraceStep(self.current_state, None, 0))

    def process_symbol(self, symbol: str) -> bool:
        """Advance on `symbol`; False (state untouched) if it cannot."""
        if self.current_state is None:
            raise NotInitializedError(
                "Automaton has not been initialized, call reset() first"
            )

        if symbol not in self.alphabet:
            return False

        next_state = self.transitions.get((self.current_state, symbol))
        if next_state is None:
            return False

        self.current_state = next_state
        self.execution_path.append(
            TraceStep(next_state, symbol, len(self.execution_path))
        )
        return True

    def recognize_word(self, word: str) -> RecognitionResult:
        self.reset()
        result = RecognitionResult(word=word)

        try:
            for symbol in word:
                if not self.process_symbol(symbol):
                    result.error = (
                        f"No transition defined for symbol '{symbol}' "
                        f"from state '{self.current_state}'"
                    )
                    result.path = list(self.execution_path)
                    return result
        except NotInitializedError as e:
            result.error = str(e)
            return result

        result.accepted = self.current_state in self.final_states
        result.final_state = self.current_state
        result.path = list(self.execution_path)

        log.debug(
            "word_recognized",
            automaton=self.name,
            word=word,
            accepted=result.accepted,
            final_state=result.final_state,
        )
        return result

    def accepts(self, word: str) -> bool:
        return self.recognize_word(word).accepted

    # -------------------------------------------------------------------------
    # Conversions
    # -------------------------------------------------------------------------

    def to_regular_grammar(self, name: Optional[str] = None) -> "RegularGrammar":
        """
        Build the right-linear grammar generating the same language.

        For every transition (q, a) -> p:
            q -> ap
            q -> a       if p is final
        and initial -> ε if the initial state is itself final.
        """
        # Local import to avoid circular dependency at module import time
        from grammar import RegularGrammar

        grammar = RegularGrammar(name or f"{self.name}_rg")
        grammar.set_non_terminals(self.states)
        grammar.set_terminals(self.alphabet)
        grammar.set_start_symbol(self.initial_state or "")

        for (src, symbol), dst in self.transitions.items():
            grammar.add_production(src, f"{symbol}{dst}")
            if dst in self.final_states:
                grammar.add_production(src, symbol)

        if self.initial_state in self.final_states:
            grammar.add_production(self.initial_state, grammar.EPSILON)

        log.debug(
            "automaton_converted",
            source=self.name,
            target=grammar.name,
            productions=sum(len(rhs) for rhs in grammar.productions.values()),
        )
        return grammar

    # -------------------------------------------------------------------------
    # Visualization
    # -------------------------------------------------------------------------

    def to_graphviz(self, trace: Optional[Sequence[TraceStep]] = None) -> Digraph:
        """
        Describe this automaton as a Graphviz digraph.

        States visited by `trace` (e.g. RecognitionResult.path) are filled
        orange and the edges taken are drawn red.
        """
        visited = {step.state for step in trace} if trace else set()
        taken = set()
        if trace:
            for before, after in zip(trace, trace[1:]):
                taken.add((before.state, after.state))

        dot = Digraph(
            name=self.name,
            format="png",
            graph_attr={
                "rankdir": "LR",
                "label": self.name,
                "labelloc": "t",
                "fontsize": "14",
                "fontname": "Arial",
            },
            node_attr={
                "shape": "circle",
                "fontname": "Arial",
                "style": "filled",
                "fillcolor": "lightblue",
            },
            edge_attr={"fontname": "Arial", "arrowsize": "0.8"},
        )

        dot.node("__start__", shape="point", style="invis")

        for state in sorted(self.states):
            attrs = {}
            if state in self.final_states:
                attrs["shape"] = "doublecircle"
                attrs["fillcolor"] = "lightgreen"
            if state in visited:
                attrs["fillcolor"] = "orange"
            dot.node(state, label=state, **attrs)

        if self.initial_state is not None:
            dot.edge("__start__", self.initial_state, penwidth="2")

        # Parallel edges share one arrow with a combined label
        grouped: Dict[Tuple[str, str], List[str]] = {}
        for (src, symbol), dst in self.transitions.items():
            grouped.setdefault((src, dst), []).append(symbol)

        for (src, dst), symbols in sorted(grouped.items()):
            attrs = {"label": ", ".join(sorted(symbols))}
            if (src, dst) in taken:
                attrs["color"] = "red"
                attrs["penwidth"] = "2"
            if src == dst:
                attrs["headport"] = "n"
                attrs["tailport"] = "n"
            dot.edge(src, dst, **attrs)

        return dot

    def render(
        self,
        filename: Optional[str] = None,
        view: bool = False,
        trace: Optional[Sequence[TraceStep]] = None,
    ) -> str:
        """Render to PNG through the Graphviz binaries; returns the file path."""
        dot = self.to_graphviz(trace)
        return dot.render(filename or self.name, view=view, cleanup=True)
