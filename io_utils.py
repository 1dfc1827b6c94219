from typing_extensions import *

import structlog

from automaton import Automaton, split_list
from errors import AutomataError, FormatError
from grammar import RegularGrammar

log = structlog.get_logger(__name__)

# Record codes addressing automaton fields
AUTOMATON_CODES = {1, 2, 3, 4, 5}
# Record codes addressing grammar fields
GRAMMAR_CODES = {6, 7, 8, 9}


class RecordParser:
    """
    Parser for '<code>:<name>:<payload>' description files.

        1 states            6 non-terminals
        2 alphabet          7 terminals
        3 initial state     8 start symbol
        4 final states      9 productions  (A->aB;A->a;...)
        5 transitions       (q0,a,q1;q1,b,q0;...)

    Models are created on first reference to their name and filled in the
    order the lines appear. Any failure aborts the whole load and leaves
    both collections empty.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.automata: Dict[str, Automaton] = {}
        self.grammars: Dict[str, RegularGrammar] = {}

    def parse(
        self, content: str
    ) -> Tuple[Dict[str, Automaton], Dict[str, RegularGrammar]]:
        lines = [line for line in content.splitlines() if line.strip()]

        for index, line in enumerate(lines, start=1):
            try:
                self.parse_line(line.strip())
            except AutomataError as e:
                self.clear()
                log.error("record_parse_failed", line_number=index, line=line, error=str(e))
                raise FormatError(str(e), line_number=index, line=line) from e

        log.info(
            "records_parsed",
            lines=len(lines),
            automata=sorted(self.automata),
            grammars=sorted(self.grammars),
        )
        return self.automata, self.grammars

    def parse_line(self, line: str) -> None:
        parts = line.split(":")
        if len(parts) != 3:
            raise FormatError(
                f"Invalid line format: '{line}'. Expected '<code>:<name>:<payload>'"
            )

        code_text, name, payload = (part.strip() for part in parts)
        try:
            code = int(code_text)
        except ValueError:
            raise FormatError(f"Invalid record code '{code_text}' in line '{line}'")

        if code in AUTOMATON_CODES:
            automaton = self._automaton(name)
            if code == 1:
                automaton.set_states(split_list(payload))
            elif code == 2:
                automaton.set_alphabet(split_list(payload))
            elif code == 3:
                automaton.set_initial_state(payload)
            elif code == 4:
                automaton.set_final_states(split_list(payload))
            else:
                automaton.set_transitions(payload)

        elif code in GRAMMAR_CODES:
            grammar = self._grammar(name)
            if code == 6:
                grammar.set_non_terminals(split_list(payload))
            elif code == 7:
                grammar.set_terminals(split_list(payload))
            elif code == 8:
                grammar.set_start_symbol(payload)
            else:
                grammar.set_productions(payload)

        else:
            raise FormatError(f"Unknown record code {code} in line '{line}'")

    def _automaton(self, name: str) -> Automaton:
        if name not in self.automata:
            self.automata[name] = Automaton(name, strict=self.strict)
        return self.automata[name]

    def _grammar(self, name: str) -> RegularGrammar:
        if name not in self.grammars:
            self.grammars[name] = RegularGrammar(name)
        return self.grammars[name]

    def get_automaton(self, name: str) -> Optional[Automaton]:
        return self.automata.get(name)

    def get_grammar(self, name: str) -> Optional[RegularGrammar]:
        return self.grammars.get(name)

    def clear(self) -> None:
        self.automata.clear()
        self.grammars.clear()

    def load(
        self, filename: str
    ) -> Tuple[Dict[str, Automaton], Dict[str, RegularGrammar]]:
        """Replace everything held by this parser with the models in filename."""
        with open(filename, "r", encoding="utf-8") as f:
            content = f.read()

        self.clear()
        return self.parse(content)


def load_from_file(
    filename: str, strict: bool = False
) -> Tuple[Dict[str, Automaton], Dict[str, RegularGrammar]]:
    """Parse a description file into fresh automaton and grammar dicts."""
    return RecordParser(strict=strict).load(filename)
