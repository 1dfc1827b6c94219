from typing_extensions import *

from graphviz import ExecutableNotFound

from automaton import Automaton, RecognitionResult
from errors import AutomataError
from grammar import RegularGrammar
from io_utils import RecordParser

HELP = """
Commands:
  LOADING:
    load <file>                  - Load automata/grammars from a record file
                                   (replaces everything loaded before)
    list                         - List all loaded items

  AUTOMATA OPERATIONS:
    show <name>                  - Show automaton info
    test <name> [word]           - Test if word is accepted (no word = ε)
    validate <name>              - Validate automaton or grammar
    dot <name> [word]            - Print Graphviz source, highlighting the run
    graph <name> [word]          - Render automaton to <name>.png
    to_grammar <name> [result]   - Convert automaton to regular grammar

  GRAMMAR OPERATIONS:
    show_grammar <name>          - Show grammar info
    to_automaton <name> [result] - Convert regular grammar to automaton

  GENERAL:
    delete <name>                - Delete item
    clear                        - Clear all
    exit                         - Exit
"""


def format_result(result: RecognitionResult) -> str:
    word = result.word or "ε"
    lines = [f"{word}: {'ACCEPTED' if result.accepted else 'REJECTED'}"]
    if result.path:
        steps = [result.path[0].state]
        steps += [f"-{step.symbol}-> {step.state}" for step in result.path[1:]]
        lines.append("  Path: " + " ".join(steps))
    if result.error:
        lines.append(f"  Error: {result.error}")
    return "\n".join(lines)


def print_validation(name: str, model: Union[Automaton, RegularGrammar]):
    result = model.validate()
    print(f"{name}: {'valid' if result.is_valid else 'INVALID'}")
    for error in result.errors:
        print(f"  error: {error}")
    for warning in result.warnings:
        print(f"  warning: {warning}")


def main(filename: Optional[str] = None, strict: bool = False):
    """Simple interactive terminal for automaton and grammar operations."""
    parser = RecordParser(strict=strict)
    automata = parser.automata
    grammars = parser.grammars

    def load(path: str):
        parser.load(path)
        msg = []
        if automata:
            msg.append(f"{len(automata)} automata: {', '.join(automata.keys())}")
        if grammars:
            msg.append(f"{len(grammars)} grammars: {', '.join(grammars.keys())}")
        print(f"Loaded {' and '.join(msg)}" if msg else "No items loaded")

    print("Automaton & Regular Grammar Terminal - Type 'help' for commands\n")

    if filename:
        try:
            load(filename)
        except (AutomataError, OSError) as e:
            print(f"Error: {e}")

    while True:
        try:
            command = input("> ").strip()
            if not command:
                continue

            parts = command.split()
            cmd = parts[0].lower()

            # Exit
            if cmd in ["exit", "quit"]:
                break

            # Help
            elif cmd == "help":
                print(HELP)

            # Load
            elif cmd == "load":
                if len(parts) < 2:
                    print("Usage: load <filename>")
                    continue
                load(parts[1])

            # List
            elif cmd == "list":
                if automata or grammars:
                    if automata:
                        print("Automata:")
                        for name, aut in sorted(automata.items()):
                            print(
                                f"  {name}: {len(aut.states)} states, "
                                f"{len(aut.transitions)} transitions"
                            )
                    if grammars:
                        print("Grammars:")
                        for name, gram in sorted(grammars.items()):
                            info = gram.get_info()
                            print(
                                f"  {name}: {len(gram.non_terminals)} non-terminals, "
                                f"{info['productionsCount']} productions"
                            )
                else:
                    print("Nothing loaded")

            # Show automaton info
            elif cmd == "show":
                if len(parts) < 2:
                    print("Usage: show <name>")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    info = automata[parts[1]].get_info()
                    print(f"\n{parts[1]}:")
                    print(f"  States: {{{', '.join(info['states'])}}}")
                    print(f"  Alphabet: {{{', '.join(info['alphabet'])}}}")
                    print(f"  Start: {info['initialState']}")
                    print(f"  Accepting: {{{', '.join(info['finalStates'])}}}")
                    print(f"  Transitions: {info['transitionsCount']}")
                    for t in info["transitions"]:
                        print(f"    {t['from']} -{t['symbol']}-> {t['to']}")
                    print()

            # Show grammar info
            elif cmd == "show_grammar":
                if len(parts) < 2:
                    print("Usage: show_grammar <name>")
                elif parts[1] not in grammars:
                    print(f"Grammar not found: {parts[1]}")
                else:
                    print(grammars[parts[1]])

            # Test word on automaton
            elif cmd == "test":
                if len(parts) < 2:
                    print("Usage: test <name> [word]")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    word = parts[2] if len(parts) > 2 else ""
                    print(format_result(automata[parts[1]].recognize_word(word)))

            # Validate automaton or grammar
            elif cmd == "validate":
                if len(parts) < 2:
                    print("Usage: validate <name>")
                elif parts[1] in automata:
                    print_validation(parts[1], automata[parts[1]])
                elif parts[1] in grammars:
                    print_validation(parts[1], grammars[parts[1]])
                else:
                    print(f"Not found: {parts[1]}")

            # Graphviz source / rendering
            elif cmd in ["dot", "graph"]:
                if len(parts) < 2:
                    print(f"Usage: {cmd} <name> [word]")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    aut = automata[parts[1]]
                    trace = aut.recognize_word(parts[2]).path if len(parts) > 2 else None
                    if cmd == "dot":
                        print(aut.to_graphviz(trace).source)
                    else:
                        try:
                            print(f"Created: {aut.render(parts[1], trace=trace)}")
                        except ExecutableNotFound as e:
                            print(f"Error: {e}")

            # Convert automaton to grammar
            elif cmd == "to_grammar":
                if len(parts) < 2:
                    print("Usage: to_grammar <name> [result]")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    result_name = parts[2] if len(parts) > 2 else f"{parts[1]}_rg"
                    grammars[result_name] = automata[parts[1]].to_regular_grammar(
                        result_name
                    )
                    print(f"Created grammar: {result_name}")

            # Convert grammar to automaton
            elif cmd == "to_automaton":
                if len(parts) < 2:
                    print("Usage: to_automaton <name> [result]")
                elif parts[1] not in grammars:
                    print(f"Grammar not found: {parts[1]}")
                else:
                    result_name = parts[2] if len(parts) > 2 else f"{parts[1]}_dfa"
                    automata[result_name] = grammars[parts[1]].to_finite_automaton(
                        result_name
                    )
                    print(f"Created automaton: {result_name}")

            # Delete item
            elif cmd == "delete":
                if len(parts) < 2:
                    print("Usage: delete <name>")
                else:
                    deleted = False
                    if parts[1] in automata:
                        del automata[parts[1]]
                        deleted = True
                    if parts[1] in grammars:
                        del grammars[parts[1]]
                        deleted = True
                    if deleted:
                        print(f"Deleted: {parts[1]}")
                    else:
                        print(f"Not found: {parts[1]}")

            # Clear all
            elif cmd == "clear":
                parser.clear()
                print("Cleared all")

            else:
                print(f"Unknown command: {cmd}")

        except KeyboardInterrupt:
            print("\nUse 'exit' to quit")
        except EOFError:
            break
        except (AutomataError, OSError) as e:
            print(f"Error: {e}")

    print("Goodbye!")
