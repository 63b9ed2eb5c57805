"""Host operators for executing remediation and restoration actions.

This module provides the abstract command-backed operator and concrete
operators for apt/dpkg, DKMS, the boot chain, and plain files.
"""

from gpureset.operators.apt import AptOperator
from gpureset.operators.base import Operator
from gpureset.operators.boot import BootOperator
from gpureset.operators.dkms import DkmsOperator
from gpureset.operators.files import FileOperator

__all__ = ["Operator", "AptOperator", "BootOperator", "DkmsOperator", "FileOperator"]
