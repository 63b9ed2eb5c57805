"""Classification rule sets.

A RuleSet is the immutable pattern configuration the classifier is
constructed with. Defaults reproduce the AMDGPU-PRO / ROCm cleanup lists;
operators can override any field per profile from config.toml.
"""

import re
from functools import lru_cache
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

PatternList = tuple[str, ...]


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a rule regex case-insensitively (cached)."""
    return re.compile(pattern, re.IGNORECASE)


class RuleSet(BaseModel):
    """Static pattern rules, one list per inventory category.

    Attributes:
        package_patterns: Anchored regexes matched against package names.
        module_patterns: Regexes for DKMS module names (None = package_patterns).
        source_keywords: Substrings that mark an APT source file as vendor.
        pin_keywords: Substrings that mark an APT preferences file as vendor.
        module_config_globs: File-name globs for vendor modprobe files.
        signing_key_globs: File-name globs for vendor keyrings.
        install_dir_globs: Directory-name globs for vendor trees under /opt.
        cache_dir_names: Shader cache directory names to clear.
        vulkan_icd_allow: Regexes a Vulkan ICD library path must match to stay.
        opencl_vendor_allow: Regexes an OpenCL vendor library must match to stay.
        managed_files: File names written by gpureset itself; always stock.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    package_patterns: Annotated[PatternList, Field(description="Vendor package regexes")] = ()
    module_patterns: Annotated[
        PatternList | None, Field(description="Vendor DKMS module regexes")
    ] = None
    source_keywords: Annotated[PatternList, Field(description="Vendor repository keywords")] = ()
    pin_keywords: Annotated[PatternList, Field(description="Vendor pin keywords")] = ()
    module_config_globs: Annotated[PatternList, Field(description="modprobe.d file globs")] = ()
    signing_key_globs: Annotated[PatternList, Field(description="trusted.gpg.d file globs")] = ()
    install_dir_globs: Annotated[PatternList, Field(description="/opt directory globs")] = ()
    cache_dir_names: Annotated[PatternList, Field(description="Shader cache names")] = ()
    vulkan_icd_allow: Annotated[PatternList, Field(description="Stock Vulkan ICD libraries")] = ()
    opencl_vendor_allow: Annotated[
        PatternList, Field(description="Stock OpenCL vendor libraries")
    ] = ()
    managed_files: Annotated[PatternList, Field(description="Files owned by gpureset")] = ()

    @field_validator(
        "package_patterns", "module_patterns", "vulkan_icd_allow", "opencl_vendor_allow"
    )
    @classmethod
    def validate_regexes(cls, v: PatternList | None) -> PatternList | None:
        """Reject patterns that do not compile."""
        for pattern in v or ():
            try:
                compile_pattern(pattern)
            except re.error as e:
                msg = f"invalid pattern {pattern!r}: {e}"
                raise ValueError(msg) from None
        return v

    @property
    def effective_module_patterns(self) -> PatternList:
        """Module patterns, falling back to the package patterns."""
        if self.module_patterns is None:
            return self.package_patterns
        return self.module_patterns


class RuleOverrides(BaseModel):
    """Partial RuleSet read from config.toml; unset fields keep their default."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    package_patterns: PatternList | None = None
    module_patterns: PatternList | None = None
    source_keywords: PatternList | None = None
    pin_keywords: PatternList | None = None
    module_config_globs: PatternList | None = None
    signing_key_globs: PatternList | None = None
    install_dir_globs: PatternList | None = None
    cache_dir_names: PatternList | None = None
    vulkan_icd_allow: PatternList | None = None
    opencl_vendor_allow: PatternList | None = None
    managed_files: PatternList | None = None

    def apply(self, rules: RuleSet) -> RuleSet:
        """Return a validated copy of ``rules`` with the set fields replaced."""
        updates = self.model_dump(exclude_none=True)
        return RuleSet.model_validate({**rules.model_dump(), **updates})


# =============================================================================
# Default rules
# =============================================================================

# Module preference file written by the restorer; never quarantined on re-runs.
MODULE_PREFERENCE_FILE = "10-amdgpu-prefer.conf"

FULL_PACKAGE_PATTERNS: PatternList = (
    r"^amdgpu(-.*)?$",
    r"^amdgpu-pro(-.*)?$",
    r"^opencl-amdgpu(-.*)?$",
    r"^ocl-icd-amdgpu(-.*)?$",
    r"^vulkan-amdgpu(-.*)?$",
    r"^amdvlk(-.*)?$",
    r"^hip(-.*)?$",
    r"^hipblas(-.*)?$",
    r"^hipfft(-.*)?$",
    r"^hiprand(-.*)?$",
    r"^hipsparse(-.*)?$",
    r"^hsa(-.*)?$",
    r"^hsakmt-roct(-.*)?$",
    r"^hsa-rocr(-.*)?$",
    r"^roc(-.*)?$",
    r"^rocm(-.*)?$",
    r"^rocr(-.*)?$",
    r"^roct(-.*)?$",
    r"^amf(-.*)?$",
)

USERLAND_PACKAGE_PATTERNS: PatternList = (
    r"^amdvlk(-.*)?$",
    r"^vulkan-amdgpu(-pro)?(-.*)?$",
    r"^opencl-amdgpu(-.*)?$",
    r"^ocl-icd-amdgpu(-.*)?$",
)

SOURCE_KEYWORDS: PatternList = (
    "repo.radeon.com",
    "rocm",
    "oibaf",
    "kisak",
    "graphics-drivers",
)

DEFAULT_CACHE_DIR_NAMES: PatternList = ("mesa_shader_cache",)

FULL_RULES = RuleSet(
    package_patterns=FULL_PACKAGE_PATTERNS,
    module_patterns=(*FULL_PACKAGE_PATTERNS, r"^roc.*$", r"^hsa.*$"),
    source_keywords=SOURCE_KEYWORDS,
    pin_keywords=("amdgpu", "rocm", "radeon"),
    module_config_globs=("*amdgpu*.conf", "*radeon*.conf"),
    signing_key_globs=("*amdgpu*", "*rocm*"),
    install_dir_globs=("amdgpu", "amdgpu-pro", "rocm*"),
    cache_dir_names=DEFAULT_CACHE_DIR_NAMES,
    vulkan_icd_allow=("radv",),
    opencl_vendor_allow=("libMesaOpenCL", "libRusticlOpenCL"),
    managed_files=(MODULE_PREFERENCE_FILE,),
)

USERLAND_RULES = FULL_RULES.model_copy(
    update={
        "package_patterns": USERLAND_PACKAGE_PATTERNS,
        "module_patterns": None,
        "source_keywords": (*SOURCE_KEYWORDS, "llvm-toolchain"),
    }
)
