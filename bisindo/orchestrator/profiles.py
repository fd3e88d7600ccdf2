from dataclasses import dataclass
from typing import Literal

from bisindo.orchestrator.contracts import PreprocessConfig

ProfileName = Literal["interactive", "continuous"]

@dataclass(frozen=True)
class Profile:
    name: ProfileName
    preprocess: PreprocessConfig
    auto_recover: bool             # Error returns to Ready on its own

# interactive: one cycle per shutter press / gallery pick
INTERACTIVE = Profile("interactive", PreprocessConfig(target_width=224, quality=0.7), auto_recover=False)
# continuous: LoopController re-triggers cycles
CONTINUOUS = Profile("continuous", PreprocessConfig(target_width=256, quality=1.0), auto_recover=True)
