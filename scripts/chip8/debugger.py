"""
Interactive CHIP-8 debugger.

The scheduler hands Debugger.before_instruction to every Chip8.cycle call.
Execution pauses before an instruction when stepping, or when a breakpoint
is set on the instruction's mnemonic, and a small command shell takes over:

  state     (g)  show registers, timers, stack and keys
  step      (n)  execute one instruction and pause again
  break     (b)  list breakpoints, or toggle one: break 8XY4 / break 14
  continue  (m)  run until a breakpoint is hit
  quit      (k)  stop the emulator
"""

import cmd

from chip8 import MNEMONICS

RUNNING = 'running'
STEPPING = 'stepping'
AT_BREAKPOINT = 'at-breakpoint'
TERMINATED = 'terminated'


class Debugger(cmd.Cmd):
    prompt = "(chip8) "

    def __init__(self, stdin=None, stdout=None):
        super().__init__(stdin=stdin, stdout=stdout)
        if stdin is not None:
            self.use_rawinput = False
        # the original interpreter halts before the very first instruction
        self.state = STEPPING
        self.stepping = True
        self.breakpoints = set()
        self.chip = None
        self.mnemonic = None

    @property
    def terminated(self):
        return self.state == TERMINATED

    def _print(self, msg=""):
        print(msg, file=self.stdout)

    # ********** HOOK CALLED BY THE SCHEDULER
    def before_instruction(self, chip, mnemonic, instruction):
        """pause if needed before the instruction runs, return False if it must not run"""
        if self.terminated:
            return False
        if mnemonic in self.breakpoints:
            self.state = AT_BREAKPOINT
            self._print(f"Hit breakpoint on {mnemonic}")
        elif not self.stepping:
            return True
        self.pause(chip, mnemonic, instruction)
        return not self.terminated

    def pause(self, chip, mnemonic, instruction):
        self.chip, self.mnemonic = chip, mnemonic
        name = mnemonic or "undefined instruction"
        self.cmdloop(intro=f"\nPaused Execution before {name} (0x{instruction.word:04X}) at 0x{chip.pc - 2:03x}")

    def toggle_breakpoint(self, mnemonic):
        """flip the breakpoint on an instruction mnemonic, return whether it is now set"""
        if mnemonic not in MNEMONICS:
            raise ValueError(f"Unknown instruction {mnemonic!r}")
        if mnemonic in self.breakpoints:
            self.breakpoints.remove(mnemonic)
            return False
        self.breakpoints.add(mnemonic)
        return True

    # ********** COMMANDS
    def do_state(self, arg):
        """Show the machine state: state"""
        self._print(str(self.chip))
    do_g = do_state

    def do_step(self, arg):
        """Execute the next instruction and pause again: step"""
        self.stepping = True
        self.state = STEPPING
        return True
    do_n = do_step

    def do_break(self, arg):
        """Toggle a breakpoint by mnemonic or menu number: break [8XY4|14]"""
        arg = arg.strip().upper()
        if not arg:
            self._print_menu()
            return
        if arg.isdigit():
            number = int(arg)
            if not 1 <= number <= len(MNEMONICS):
                self._print("Invalid input")
                return
            arg = MNEMONICS[number - 1]
        try:
            is_set = self.toggle_breakpoint(arg)
        except ValueError as err:
            self._print(str(err))
            return
        self._print(f"{'Setting' if is_set else 'Removing'} breakpoint on {arg}")
    do_b = do_break

    def do_continue(self, arg):
        """Run until a breakpoint is hit: continue"""
        self.stepping = False
        self.state = RUNNING
        return True
    do_m = do_continue

    def do_quit(self, arg):
        """Stop the emulator: quit"""
        self.state = TERMINATED
        return True
    do_k = do_quit

    def do_EOF(self, arg):
        self._print()
        return self.do_quit(arg)

    def default(self, line):
        self._print(f"Unknown command: {line.split()[0]!r}. Type 'help' for available commands.")

    def emptyline(self):
        """Don't repeat the last command on empty input."""
        pass

    def _print_menu(self):
        rows = (len(MNEMONICS) + 3) // 4
        for row in range(rows):
            cells = []
            for number in range(row + 1, len(MNEMONICS) + 1, rows):
                mnemonic = MNEMONICS[number - 1]
                mark = "*" if mnemonic in self.breakpoints else " "
                cells.append(f"{number:>2}. {mnemonic}{mark}")
            self._print("   ".join(cells))
        if self.breakpoints:
            self._print("Breakpoints: " + ", ".join(m for m in MNEMONICS if m in self.breakpoints))
        else:
            self._print("No breakpoints set.")
