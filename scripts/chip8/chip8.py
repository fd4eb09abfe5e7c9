# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# https://chip-8.github.io/links/
#
# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html#quirk6
#
# TEST SUITE
# https://github.com/Timendus/chip8-test-suite


import os
import random
import sys
from collections import namedtuple
from functools import wraps


# ******************** STATIC SECTION
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
            0x20, 0x60, 0x20, 0x20, 0x70,  # 1
            0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
            0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
            0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
            0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
            0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
            0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
            0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
            0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
            0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
            0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
            0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
            0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
            0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F

# colours are packed as 0xRRGGBBAA, the order the user picks them from on the command line
PALETTE = {
    1: ("Black", 0x000000FF),
    2: ("Red", 0xFF0000FF),
    3: ("Dark Red", 0x5C0505FF),
    4: ("Magenta", 0xFB08F7FF),
    5: ("Lavender", 0xC325FFFF),
    6: ("Green", 0x08FB0CFF),
    7: ("Dark Green", 0x1C421FFF),
    8: ("Yellow", 0xF7FB08FF),
    9: ("Gold", 0xFFD100FF),
    10: ("Orange", 0xFF8B00FF),
    11: ("Sage", 0x6FB97FFF),
    12: ("Blue", 0x087EFBFF),
    13: ("Sky Blue", 0x28AEFFFF),
    14: ("Dark Blue", 0x0C08FBFF),
    15: ("Turquoise", 0x08F7FBFF),
    16: ("White", 0xFFFFFFFF),
}
BLACK = PALETTE[1][1]
WHITE = PALETTE[16][1]

MEMORY_SIZE = 4096
FONT_START_ADDRESS = 0x50
FONT_END_ADDRESS = FONT_START_ADDRESS + len(C8_FONTS)
FONT_CHAR_SIZE = 5
ROM_START_ADDRESS = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
STACK_SIZE = 16
NUM_KEYS = 16
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False
SCREEN_HEIGHT = 32
SCREEN_WIDTH = 64
SCREEN_SIZE = SCREEN_WIDTH * SCREEN_HEIGHT

# the order is the one shown by the debugger's breakpoint menu
MNEMONICS = (
    "00E0", "00EE", "1NNN", "2NNN", "3XNN", "4XNN", "5XY0", "6XNN", "7XNN",
    "8XY0", "8XY1", "8XY2", "8XY3", "8XY4", "8XY5", "8XY6", "8XY7", "8XYE",
    "9XY0", "ANNN", "BNNN", "CXNN", "DXYN", "EX9E", "EXA1", "FX07", "FX15",
    "FX18", "FX1E", "FX0A", "FX29", "FX33", "FX55", "FX65",
)

# opcode nibble -> mnemonic, or (field selecting the sub-opcode, {sub-opcode: mnemonic})
DISPATCH_TABLE = {
    0x0: ('nnn', {0x0E0: "00E0", 0x0EE: "00EE"}),
    0x1: "1NNN",
    0x2: "2NNN",
    0x3: "3XNN",
    0x4: "4XNN",
    0x5: ('n', {0x0: "5XY0"}),
    0x6: "6XNN",
    0x7: "7XNN",
    0x8: ('n', {
        0x0: "8XY0",
        0x1: "8XY1",
        0x2: "8XY2",
        0x3: "8XY3",
        0x4: "8XY4",
        0x5: "8XY5",
        0x6: "8XY6",
        0x7: "8XY7",
        0xE: "8XYE",
    }),
    0x9: ('n', {0x0: "9XY0"}),
    0xA: "ANNN",
    0xB: "BNNN",
    0xC: "CXNN",
    0xD: "DXYN",
    0xE: ('nn', {0x9E: "EX9E", 0xA1: "EXA1"}),
    0xF: ('nn', {
        0x07: "FX07",
        0x0A: "FX0A",
        0x15: "FX15",
        0x18: "FX18",
        0x1E: "FX1E",
        0x29: "FX29",
        0x33: "FX33",
        0x55: "FX55",
        0x65: "FX65",
    }),
}


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to print out the ASM of the instruction being called"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(*args, **kwargs):
            mem_addr = args[0].pc - 2   # args[0] equals self of the decorated method, pc already points past it
            vals = fn(*args, **kwargs)  # use the locals() values of each decorated function in the print
            vals['mem_addr'] = mem_addr
            if DEBUG: print(msg.format(**vals))
        return wrapper_fn
    return decorator


class Instruction(namedtuple('Instruction', 'opcode x y n nn nnn')):
    __slots__ = ()

    @property
    def word(self):
        """the two instruction bytes joined back together"""
        return (self.opcode << 12) | self.nnn

    def __str__(self):
        return f"{self.word:04X}"


def decode(mem, pc):
    """split the two bytes at pc into the operand fields, any pair of bytes is a valid instruction"""
    hi, lo = mem[pc], mem[pc + 1]
    return Instruction(
        opcode=hi >> 4,
        x=hi & 0xF,
        y=lo >> 4,
        n=lo & 0xF,
        nn=lo,
        nnn=((hi & 0xF) << 8) | lo,
    )


def mnemonic_for(instruction):
    """return the mnemonic of a decoded instruction, None if its sub-opcode is not mapped"""
    entry = DISPATCH_TABLE[instruction.opcode]
    if isinstance(entry, str):
        return entry
    field, sub_opcodes = entry
    return sub_opcodes.get(getattr(instruction, field))


# ******************** MEMORY SECTION
# ********** WRAPS A FIXED ARRAY TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self):
        self.addresses = [0] * STACK_SIZE
        self.pointer = 0

    def __len__(self):
        return self.pointer

    def __str__(self):
        return "[" + ", ".join(f"0x{addr:03x}" for addr in self.addresses[:self.pointer]) + "]"

    def push(self, address):
        if self.pointer >= STACK_SIZE:
            raise IndexError(f"The CHIP-8 stack can contain at most {STACK_SIZE} addresses. Limit exceeded")
        self.addresses[self.pointer] = address
        self.pointer += 1

    def pop(self):
        if self.pointer == 0:
            raise IndexError("Return with an empty CHIP-8 stack")
        self.pointer -= 1
        address = self.addresses[self.pointer]
        self.addresses[self.pointer] = 0
        return address


# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    """4 KiB of RAM, integer addresses wrap at 12 bits and the font table is read-only"""
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.inner[FONT_START_ADDRESS:FONT_END_ADDRESS] = bytes(C8_FONTS)

    def __len__(self):
        return len(self.inner)

    @staticmethod
    def _check_writable(start, stop):
        if start < FONT_END_ADDRESS and stop > FONT_START_ADDRESS:
            raise IndexError(f"Write to 0x{start:03x} would overwrite the font table")

    def __setitem__(self, key, value):
        if isinstance(key, slice):
            start, stop, _ = key.indices(len(self.inner))
            self._check_writable(start, stop)
        else:
            key &= 0xFFF
            self._check_writable(key, key + 1)
        self.inner[key] = value

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self.inner[index]
        return self.inner[index & 0xFFF]

    def store(self, address, values):
        """write values at consecutive wrapped addresses, nothing is written if any of them is rejected"""
        addresses = [(address + i) & 0xFFF for i in range(len(values))]
        for addr in addresses:
            self._check_writable(addr, addr + 1)
        for addr, value in zip(addresses, values):
            self.inner[addr] = value

    def load(self, rom):
        """copy the ROM bytes verbatim at the program start address"""
        if len(rom) > MAX_ROM_SIZE:
            raise ValueError(f"ROM is {len(rom)} bytes, at most {MAX_ROM_SIZE} fit in memory")
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS + len(rom)] = rom


# ******************** CPU SECTION
class Chip8:
    def __init__(self, foreground=WHITE, background=BLACK, font_from_register=False, rng=None):
        self.foreground = foreground
        self.background = background
        # FX29 historically looked up the glyph from the operand's high nibble instead of Vx
        self.font_from_register = font_from_register
        self.rng = rng if rng is not None else random.Random()
        self.instructions = {
            "00E0": self._clear_screen,
            "00EE": self._return,
            "1NNN": self._jump,
            "2NNN": self._call_addr,
            "3XNN": self._skip_if_eq,
            "4XNN": self._skip_if_not_eq,
            "5XY0": self._skip_if_eq_regs,
            "6XNN": self._set_vx,
            "7XNN": self._add_to_vx,
            "8XY0": self._set_vx_to_vy,
            "8XY1": self._set_vx_or_vy,
            "8XY2": self._set_vx_and_vy,
            "8XY3": self._set_vx_xor_vy,
            "8XY4": self._add_vx_vy,
            "8XY5": self._sub_vx_vy,
            "8XY6": self._shr,
            "8XY7": self._subn_vx_vy,
            "8XYE": self._shl,
            "9XY0": self._skip_if_not_eq_regs,
            "ANNN": self._set_idx,
            "BNNN": self._jump_plus,
            "CXNN": self._random_byte_and,
            "DXYN": self._to_screen,
            "EX9E": self._skip_if_pressed,
            "EXA1": self._skip_if_not_pressed,
            "FX07": self._set_vx_dt,
            "FX15": self._set_dt_vx,
            "FX18": self._set_st,
            "FX1E": self._add_to_idx,
            "FX0A": self._wait_keypress,
            "FX29": self._select_char,
            "FX33": self._bcd_repr,
            "FX55": self._store_vregs,
            "FX65": self._load_vregs,
        }
        self.reset()

    def reset(self):
        """zero the whole machine, seed the font table and clear the screen"""
        self.mem = Memory()
        self.stack = Stack()
        self.registers = bytearray(16)
        self.pc = 0     # only points somewhere once a ROM is loaded
        self.index = 0
        self.delay_timer = 0
        self.sound_timer = 0
        self.keys_pressed = 0
        self.keys_snapshot = 0
        self.display_interrupt = False
        self.cycles_since_draw = 0
        self.framebuffer = [self.background] * SCREEN_SIZE

    def __str__(self):
        lines = [
            f"PC:          0x{self.pc:04x}",
            f"IRegister:   0x{self.index:04x}",
            f"Delay Timer: {self.delay_timer}",
            f"Sound Timer: {self.sound_timer}",
        ]
        lines += [f"V{r:X}:          {value:02X} ({value})" for r, value in enumerate(self.registers)]
        lines.append(f"Stack:       {self.stack}")
        lines.append("Keys Pressed: " + " ".join(str(self.keys_pressed >> k & 1) for k in range(NUM_KEYS)))
        lines.append("Keys Snapshot:" + " ".join(str(self.keys_snapshot >> k & 1) for k in range(NUM_KEYS)))
        return "\n".join(lines)

    def load(self, rom):
        """load ROM bytes and point the program counter at them, raise ValueError if they don't fit"""
        self.mem.load(rom)
        self.pc = ROM_START_ADDRESS

    def load_rom(self, path):
        """load ROM file from the given path, report the problem and return False if it can't be done"""
        try:
            with open(path, mode='rb') as f:
                rom = f.read()
            self.load(rom)
        except (OSError, ValueError) as err:
            print(f"Failed to load ROM {path}: {err}", file=sys.stderr)
            return False
        if DEBUG: print(f"The ROM at path {path} has been loaded successfully")
        return True

    def snapshot(self):
        """immutable copy of the framebuffer for the presentation layer"""
        return tuple(self.framebuffer)

    def update_timers(self):
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def fetch(self):
        # each instruction is two bytes long
        instruction = decode(self.mem, self.pc)
        self._goto_next_instruction()
        return instruction

    def cycle(self, hook=None):
        """
        fetch, decode and execute one instruction
        hook(chip, mnemonic, instruction) runs before the instruction, returning False cancels it
        """
        instruction = self.fetch()
        mnemonic = mnemonic_for(instruction)
        if hook is not None and not hook(self, mnemonic, instruction):
            self.pc -= 0x2      # leave the instruction to be fetched again
            return None
        self.cycles_since_draw = min(self.cycles_since_draw + 1, 0xFF)
        if mnemonic is not None:
            self.instructions[mnemonic](instruction)
        elif instruction.opcode == 0x0:
            # 0NNN calls a machine code routine, never supported
            if DEBUG: print(f"Skipping 0x{instruction.word:04x} instruction")
        else:
            print(f"UNDEFINED INSTRUCTION 0x{instruction.word:04X}", file=sys.stderr)
        return mnemonic

    def _goto_next_instruction(self):
        self.pc += 0x2

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, ins):
        # colours are configurable so the background has to be written pixel by pixel
        self.framebuffer[:] = [self.background] * SCREEN_SIZE
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, ins):
        """return from a subroutine"""
        self.pc = self.stack.pop()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{ins.nnn:03x}")
    def _jump(self, ins):
        self.pc = ins.nnn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{ins.nnn:03x}")
    def _call_addr(self, ins):
        self.stack.push(self.pc)
        self.pc = ins.nnn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{ins.x:X}, {ins.nn}")
    def _skip_if_eq(self, ins):
        if self.registers[ins.x] == ins.nn:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{ins.x:X}, {ins.nn}")
    def _skip_if_not_eq(self, ins):
        if self.registers[ins.x] != ins.nn:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{ins.x:X}, V{ins.y:X}")
    def _skip_if_eq_regs(self, ins):
        if self.registers[ins.x] == self.registers[ins.y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{ins.x:X}, V{ins.y:X}")
    def _skip_if_not_eq_regs(self, ins):
        if self.registers[ins.x] != self.registers[ins.y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, {ins.nn}")
    def _set_vx(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.registers[ins.x] = ins.nn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{ins.x:X}, {ins.nn}")
    def _add_to_vx(self, ins):
        """add to the value already present in one of the variable registers, VF is not touched"""
        self.registers[ins.x] = (self.registers[ins.x] + ins.nn) & 0xFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, V{ins.y:X}")
    def _set_vx_to_vy(self, ins):
        self.registers[ins.x] = self.registers[ins.y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{ins.x:X}, V{ins.y:X}")
    def _set_vx_or_vy(self, ins):
        self.registers[ins.x] |= self.registers[ins.y]
        self.registers[0xF] = 0         # compatibility quirk 1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{ins.x:X}, V{ins.y:X}")
    def _set_vx_and_vy(self, ins):
        self.registers[ins.x] &= self.registers[ins.y]
        self.registers[0xF] = 0         # compatibility quirk 1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{ins.x:X}, V{ins.y:X}")
    def _set_vx_xor_vy(self, ins):
        self.registers[ins.x] ^= self.registers[ins.y]
        self.registers[0xF] = 0         # compatibility quirk 1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{ins.x:X}, V{ins.y:X}")
    def _add_vx_vy(self, ins):
        """set the value of Vx to Vx + Vy, VF = carry"""
        vx, vy = self.registers[ins.x], self.registers[ins.y]
        self.registers[ins.x] = (vx + vy) & 0xFF
        self.registers[0xF] = 1 if vy > 0xFF - vx else 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{ins.x:X}, V{ins.y:X}")
    def _sub_vx_vy(self, ins):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        vx, vy = self.registers[ins.x], self.registers[ins.y]
        self.registers[ins.x] = (vx - vy) & 0xFF
        # equal operands leave VF alone
        if vx > vy:
            self.registers[0xF] = 1
        elif vy > vx:
            self.registers[0xF] = 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{ins.x:X}, V{ins.y:X}")
    def _subn_vx_vy(self, ins):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        vx, vy = self.registers[ins.x], self.registers[ins.y]
        self.registers[ins.x] = (vy - vx) & 0xFF
        if vy > vx:
            self.registers[0xF] = 1
        elif vx > vy:
            self.registers[0xF] = 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{ins.x:X}, V{ins.y:X}")
    def _shr(self, ins):
        """set Vx equal to Vy SHR 1"""
        vy = self.registers[ins.y]     # compatibility quirk 2
        self.registers[ins.x] = vy >> 1
        self.registers[0xF] = vy & 0x1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{ins.x:X}, V{ins.y:X}")
    def _shl(self, ins):
        """set Vx equal to Vy SHL 1"""
        vy = self.registers[ins.y]     # compatibility quirk 2
        self.registers[ins.x] = (vy << 1) & 0xFF
        self.registers[0xF] = (vy & 0x80) >> 7
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{ins.nnn:03x}")
    def _set_idx(self, ins):
        self.index = ins.nnn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V0, 0x{ins.nnn:03x}")
    def _jump_plus(self, ins):
        self.pc = ins.nnn + self.registers[0x0]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{ins.x:X}, 0x{ins.nn:02x}")
    def _random_byte_and(self, ins):
        rnd = self.rng.randint(0, 255)
        self.registers[ins.x] = rnd & ins.nn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{ins.x:X}, V{ins.y:X}, {ins.n}")
    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        if not self.display_interrupt:
            self.pc -= 0x2      # display wait quirk, retry until the scheduler raises the interrupt
            return locals()
        self.display_interrupt = False
        self.cycles_since_draw = 0

        x = self.registers[ins.x] % SCREEN_WIDTH
        y = self.registers[ins.y] % SCREEN_HEIGHT
        self.registers[0xF] = 0
        for row in range(ins.n):
            if y + row >= SCREEN_HEIGHT:
                break           # clipping quirk, sprites don't wrap
            sprite_byte = self.mem[self.index + row]
            for col in range(8):
                if x + col >= SCREEN_WIDTH:
                    break
                if not sprite_byte & (0x80 >> col):
                    continue
                # sprites are XORed onto the existing screen and if this
                # causes any pixel to be erased then VF=1, otherwise VF=0
                pixel = (y + row) * SCREEN_WIDTH + x + col
                if self.framebuffer[pixel] == self.foreground:
                    self.framebuffer[pixel] = self.background
                    self.registers[0xF] = 1
                else:
                    self.framebuffer[pixel] = self.foreground
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{ins.x:X}")
    def _skip_if_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        if (self.keys_pressed >> self.registers[ins.x]) & 1:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{ins.x:X}")
    def _skip_if_not_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        if not (self.keys_pressed >> self.registers[ins.x]) & 1:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, DT")
    def _set_vx_dt(self, ins):
        self.registers[ins.x] = self.delay_timer
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{ins.x:X}")
    def _set_dt_vx(self, ins):
        self.delay_timer = self.registers[ins.x]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{ins.x:X}")
    def _set_st(self, ins):
        self.sound_timer = self.registers[ins.x]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{ins.x:X}")
    def _add_to_idx(self, ins):
        """set I = I + Vx, VF records an overflow past the addressable memory"""
        total = self.index + self.registers[ins.x]
        self.index = total & 0xFFFF
        # historical guard, the flag was only raised above 1000
        if total > 0x0FFF and self.index > 1000:
            self.registers[0xF] = 1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, K")
    def _wait_keypress(self, ins):
        """wait for a key to go down since the last snapshot and store its value in Vx"""
        pressed = None
        if self.keys_pressed != self.keys_snapshot:
            for key in range(NUM_KEYS):
                if not (self.keys_snapshot >> key) & 1 and (self.keys_pressed >> key) & 1:
                    pressed = key
                    break
            self.keys_snapshot = self.keys_pressed
        if pressed is None:
            self.pc -= 0x2      # stay on the same instruction until a key is pressed
        else:
            self.registers[ins.x] = pressed
            self.keys_snapshot = 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{ins.x:X}")
    def _select_char(self, ins):
        """set I to location of sprite for a hex digit"""
        if self.font_from_register:
            char = self.registers[ins.x] & 0xF
        else:
            char = ins.x >> 4   # high nibble of the 4-bit operand, always glyph 0
        self.index = FONT_START_ADDRESS + char * FONT_CHAR_SIZE
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{ins.x:X}")
    def _bcd_repr(self, ins):
        """takes the decimal value of Vx and the hundreds digit in memory at I, the tens digit at I+1, the ones digit at I+2"""
        vx = self.registers[ins.x]
        self.mem.store(self.index, (vx // 100, (vx // 10) % 10, vx % 10))
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{ins.x:X}")
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        self.mem.store(self.index, self.registers[:ins.x + 1])
        self.index = (self.index + ins.x + 1) & 0xFFFF     # compatibility quirk 6
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, [I]")
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        for reg in range(ins.x + 1):
            self.registers[reg] = self.mem[self.index]
            self.index = (self.index + 1) & 0xFFFF     # compatibility quirk 6
        return locals()
