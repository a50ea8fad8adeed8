"""Lower user-defined Python functions into Cascade ASTs."""

# Errors
from transmog.errors import ArityMismatch as ArityMismatch
from transmog.errors import RecursionDepthExceeded as RecursionDepthExceeded
from transmog.errors import ScopeResolutionFailure as ScopeResolutionFailure
from transmog.errors import TransmogrifyError as TransmogrifyError
from transmog.errors import UnknownOperator as UnknownOperator
from transmog.errors import UnsupportedConstruct as UnsupportedConstruct

# Function system
from transmog.function import UDF as UDF
from transmog.function import transmogrify as transmogrify
from transmog.function import udf as udf

# Nodes
from transmog.nodes import NO_ARGUMENTS as NO_ARGUMENTS
from transmog.nodes import Assign as Assign
from transmog.nodes import Call as Call
from transmog.nodes import Else as Else
from transmog.nodes import For as For
from transmog.nodes import FunctionDef as FunctionDef
from transmog.nodes import If as If
from transmog.nodes import Literal as Literal
from transmog.nodes import Node as Node
from transmog.nodes import Operation as Operation
from transmog.nodes import Range as Range
from transmog.nodes import Return as Return
from transmog.nodes import Sequence as Sequence
from transmog.nodes import Variable as Variable

# Operators
from transmog.operators import Fixity as Fixity
from transmog.operators import classify as classify

# Scope
from transmog.scope import is_user_defined as is_user_defined

# Serialization
from transmog.serializer import serialize as serialize
from transmog.serializer import to_json as to_json
