from ..data.toeic_table import PartSpecTable
from ..domain.models import PartSpec

# Singleton Instance for easy import
part_table = PartSpecTable()

def get_part_spec(part_number: int) -> PartSpec:
    """
    Public Service API: Resolve a part number against the TOEIC table.

    Raises:
        InvalidPartError: For anything other than parts 1-4.
    """
    return part_table.lookup(part_number)
