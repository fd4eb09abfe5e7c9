import argparse
import os
import sys
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"
import pygame

from chip8 import Chip8, PALETTE
from debugger import Debugger
from display import DEFAULT_SCALE, Keypad, Screen
from scheduler import DEFAULT_CYCLES_PER_SECOND, Scheduler

DEFAULT_FOREGROUND = 16
DEFAULT_BACKGROUND = 1


def positive_int(minimum):
    def convert(value):
        try:
            number = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
        if number < minimum:
            raise argparse.ArgumentTypeError(f"{number} is less than {minimum}")
        return number
    return convert


def colour(value):
    try:
        return PALETTE[int(value)][1]
    except (ValueError, KeyError):
        raise argparse.ArgumentTypeError(f"{value!r} is not a colour between 1 and {len(PALETTE)}")


def parse_args(argv=None):
    colours = "\n".join(f"    {number} {name}" for number, (name, _) in PALETTE.items())
    parser = argparse.ArgumentParser(
        prog="chip8",
        description="CHIP-8 interpreter",
        epilog=f"available colours:\n{colours}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("rom", help="input rom file")
    parser.add_argument("-d", "--debug", action="store_true", help="run the debugger")
    parser.add_argument("-s", "--scale", type=positive_int(1), default=DEFAULT_SCALE,
                        help=f"window scale (default {DEFAULT_SCALE}, minimum 1)")
    parser.add_argument("-f", dest="foreground", type=colour, default=PALETTE[DEFAULT_FOREGROUND][1],
                        help="foreground colour (see below)")
    parser.add_argument("-b", dest="background", type=colour, default=PALETTE[DEFAULT_BACKGROUND][1],
                        help="background colour (see below)")
    parser.add_argument("-c", "--cycles", type=positive_int(1), default=DEFAULT_CYCLES_PER_SECOND,
                        help=f"target CPU cycles per second (default {DEFAULT_CYCLES_PER_SECOND})")
    parser.add_argument("--font-from-register", action="store_true",
                        help="FX29 picks the font character from Vx instead of the operand")
    return parser.parse_args(argv)


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = parse_args(argv)
    chip = Chip8(args.foreground, args.background, font_from_register=args.font_from_register)
    if not chip.load_rom(args.rom):
        print("Exiting", file=sys.stderr)
        return 1
    debugger = Debugger() if args.debug else None

    # pygame initialization
    pygame.init()
    try:
        screen = Screen(args.scale, caption=os.path.basename(args.rom))
        screen.present(chip.snapshot())
        scheduler = Scheduler(chip, args.cycles, debugger=debugger, screen=screen, keypad=Keypad())
        try:
            scheduler.run()
        except IndexError as err:
            sys.exit(f"********** THE EMULATOR CRASHED ({err}) WITH THE FOLLOWING STATE\n{chip}")
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
