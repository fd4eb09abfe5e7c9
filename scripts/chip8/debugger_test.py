import io
import unittest

from chip8 import Chip8
from debugger import AT_BREAKPOINT, RUNNING, STEPPING, TERMINATED, Debugger
from scheduler import Scheduler


def make_chip(*words):
    chip = Chip8()
    chip.load(b"".join(w.to_bytes(2, "big") for w in words))
    return chip


def make_debugger(*commands):
    return Debugger(stdin=io.StringIO("".join(c + "\n" for c in commands)), stdout=io.StringIO())


class TestBreakpoints(unittest.TestCase):
    def test_toggle(self):
        debugger = make_debugger()
        self.assertTrue(debugger.toggle_breakpoint("8XY4"))
        self.assertIn("8XY4", debugger.breakpoints)
        self.assertFalse(debugger.toggle_breakpoint("8XY4"))
        self.assertEqual(debugger.breakpoints, set())

    def test_unknown_mnemonic(self):
        debugger = make_debugger()
        with self.assertRaises(ValueError):
            debugger.toggle_breakpoint("8XY9")

    def test_break_command_by_number_and_name(self):
        # 8 is 6XNN in the menu, then the stepping prompt is left with continue
        debugger = make_debugger("break 8", "b ANNN", "break", "m")
        chip = make_chip(0x00E0)
        self.assertTrue(chip.cycle(debugger.before_instruction))
        self.assertEqual(debugger.breakpoints, {"6XNN", "ANNN"})
        out = debugger.stdout.getvalue()
        self.assertIn("Setting breakpoint on 6XNN", out)
        self.assertIn("Breakpoints: 6XNN, ANNN", out)

    def test_break_command_rejects_bad_input(self):
        debugger = make_debugger("break 35", "break FOO", "m")
        chip = make_chip(0x00E0)
        chip.cycle(debugger.before_instruction)
        self.assertEqual(debugger.breakpoints, set())
        out = debugger.stdout.getvalue()
        self.assertIn("Invalid input", out)
        self.assertIn("Unknown instruction 'FOO'", out)


class TestPromptFlow(unittest.TestCase):
    def test_starts_stepping(self):
        debugger = make_debugger()
        self.assertEqual(debugger.state, STEPPING)
        self.assertFalse(debugger.terminated)

    def test_continue_runs_without_pausing(self):
        debugger = make_debugger("continue")
        chip = make_chip(0x6001, 0x6102, 0x6203)
        for _ in range(3):
            chip.cycle(debugger.before_instruction)
        self.assertEqual(debugger.state, RUNNING)
        self.assertEqual(bytes(chip.registers[0:3]), bytes([1, 2, 3]))
        self.assertEqual(debugger.stdout.getvalue().count("Paused Execution"), 1)

    def test_state_command_prints_dump(self):
        debugger = make_debugger("g", "n")
        chip = make_chip(0x6001)
        chip.cycle(debugger.before_instruction)
        out = debugger.stdout.getvalue()
        self.assertIn("Paused Execution before 6XNN (0x6001) at 0x200", out)
        self.assertIn("PC:          0x0202", out)

    def test_quit_cancels_instruction(self):
        debugger = make_debugger("k")
        chip = make_chip(0x6001)
        self.assertIsNone(chip.cycle(debugger.before_instruction))
        self.assertEqual(debugger.state, TERMINATED)
        self.assertEqual(chip.registers[0], 0)
        self.assertEqual(chip.pc, 0x200)
        # once terminated nothing runs and no prompt opens
        self.assertIsNone(chip.cycle(debugger.before_instruction))

    def test_end_of_input_quits(self):
        debugger = make_debugger()
        chip = make_chip(0x6001)
        chip.cycle(debugger.before_instruction)
        self.assertTrue(debugger.terminated)

    def test_unknown_command(self):
        debugger = make_debugger("xyz", "k")
        chip = make_chip(0x6001)
        chip.cycle(debugger.before_instruction)
        self.assertIn("Unknown command: 'xyz'", debugger.stdout.getvalue())


class TestWithScheduler(unittest.TestCase):
    def test_breakpoint_halts_before_instruction(self):
        # set the breakpoint at the first prompt, the one on 6XNN stops before 0x204, then quit
        debugger = make_debugger("b 6XNN", "continue", "quit")
        chip = make_chip(0xA123, 0x7101, 0x6A05, 0x6B06)
        scheduler = Scheduler(chip, cycles_per_second=600, debugger=debugger)
        executed = scheduler.run_frame()
        self.assertEqual(executed, 2)
        self.assertTrue(scheduler.quit)
        self.assertEqual(chip.pc, 0x204)
        self.assertEqual(chip.registers[0xA], 0)
        self.assertEqual(chip.index, 0x123)
        self.assertIn("Hit breakpoint on 6XNN", debugger.stdout.getvalue())

    def test_breakpoint_state(self):
        states = []
        debugger = make_debugger("continue", "quit")
        debugger.toggle_breakpoint("6XNN")
        original_pause = debugger.pause

        def pause(chip, mnemonic, instruction):
            states.append(debugger.state)
            original_pause(chip, mnemonic, instruction)

        debugger.pause = pause
        chip = make_chip(0x6A05)
        Scheduler(chip, cycles_per_second=600, debugger=debugger).run_frame()
        self.assertEqual(states, [AT_BREAKPOINT])

    def test_step_executes_one_instruction(self):
        debugger = make_debugger("n", "n", "k")
        chip = make_chip(0x6001, 0x6102, 0x6203)
        scheduler = Scheduler(chip, cycles_per_second=600, debugger=debugger)
        self.assertEqual(scheduler.run_frame(), 2)
        self.assertEqual(bytes(chip.registers[0:3]), bytes([1, 2, 0]))
        self.assertEqual(chip.pc, 0x204)
        self.assertEqual(debugger.stdout.getvalue().count("Paused Execution"), 3)


if __name__ == "__main__":
    unittest.main()
