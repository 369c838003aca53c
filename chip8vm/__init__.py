# chip8vm, a Chip-8 virtual machine.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

from .machine import Chip8
from .errors import (Chip8Error, LoadError, RuntimeFault, DecodeError,
                     StackOverflowError, StackUnderflowError)
from .decode import Instruction, fetch, decode, disassemble

__version__ = "0.2.0"
