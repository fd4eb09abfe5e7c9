import time

FRAMES_PER_SECOND = 60
TIMER_FREQUENCY = 60            # delay and sound timers always count down at 60Hz
DEFAULT_CYCLES_PER_SECOND = 700
DISPLAY_WAIT_THRESHOLD = 2      # DXYN attempts before the display interrupt is raised
MAX_CATCH_UP_FRAMES = 5         # further behind than this the deadline is resynchronised


class Scheduler:
    """
    Paces the emulated CPU against the wall clock.
    Once per frame quantum it ticks the timers, raises the display interrupt
    and runs a batch of cycles_per_second / FRAMES_PER_SECOND instructions.
    """

    def __init__(self, chip, cycles_per_second=DEFAULT_CYCLES_PER_SECOND, debugger=None,
                 screen=None, keypad=None, clock=time.monotonic, sleep=time.sleep):
        if cycles_per_second <= 0:
            raise ValueError("cycles_per_second must be a positive number")
        self.chip = chip
        self.debugger = debugger
        self.screen = screen
        self.keypad = keypad
        self.clock = clock
        self.sleep = sleep
        self.quantum = 1 / FRAMES_PER_SECOND
        self.cycles_per_frame = max(1, cycles_per_second // FRAMES_PER_SECOND)
        self.timer_step = TIMER_FREQUENCY / FRAMES_PER_SECOND
        self.timer_credit = 0.0
        self.frames = 0
        self.quit = False

    def tick_timers(self):
        # counted apart from the instructions so changing the cycle rate doesn't change the timer rate
        self.timer_credit += self.timer_step
        while self.timer_credit >= 1:
            self.timer_credit -= 1
            self.chip.update_timers()

    def run_frame(self):
        """run one frame quantum, return how many instructions were executed"""
        self.tick_timers()
        if self.chip.cycles_since_draw > DISPLAY_WAIT_THRESHOLD:
            self.chip.display_interrupt = True

        hook = self.debugger.before_instruction if self.debugger is not None else None
        executed = 0
        while executed < self.cycles_per_frame and not self._check_quit():
            self.chip.cycle(hook)
            if self._check_quit():
                break   # the debugger was quit before the instruction ran
            executed += 1
        self.frames += 1
        return executed

    def _check_quit(self):
        if self.debugger is not None and self.debugger.terminated:
            self.quit = True
        return self.quit

    def run(self):
        """emulation loop, returns once the user quits"""
        deadline = self.clock() + self.quantum
        while not self.quit:
            # process user input
            if self.keypad is not None and self.keypad.poll(self.chip):
                self.quit = True
                break
            now = self.clock()
            if now < deadline:
                self.sleep(deadline - now)
                continue
            if now - deadline > MAX_CATCH_UP_FRAMES * self.quantum:
                deadline = now
            deadline += self.quantum
            self.run_frame()
            if self.screen is not None:
                self.screen.present(self.chip.snapshot())
