# chip8vm, a Chip-8 virtual machine.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.


class Chip8Error(Exception):
    pass


class LoadError(Chip8Error):
    """The program image could not be loaded. Fatal for the session."""


class RuntimeFault(Chip8Error):
    """A recoverable fault raised by a single instruction.

    The machine reports the fault and skips the offending instruction.
    """

    description = "Runtime fault"

    def __init__(self, address, word):
        self.address = address
        self.word = word
        super().__init__(f"{self.description} at {address:04x}: {word:04x}")


class DecodeError(RuntimeFault):
    description = "Invalid instruction"


class StackOverflowError(RuntimeFault):
    description = "Stack overflow"


class StackUnderflowError(RuntimeFault):
    description = "Stack underflow"
