"""Transportation advisor stage."""

from tripgen.adapters.catalogs import catalog_transportation
from tripgen.models.listings import TransportOption
from tripgen.orchestration.state import GenerationState


def advise_transportation(destination: str) -> list[TransportOption]:
    """Local transit, rideshare and taxi guidance for a destination.

    Unknown cities get the generic three-entry guidance; that is the
    defined default, not an error.
    """
    return catalog_transportation(destination).value


async def acquire_transportation(state: GenerationState) -> list[TransportOption]:
    state.sources["transportation"] = "fallback"
    return advise_transportation(state.request.destination)
