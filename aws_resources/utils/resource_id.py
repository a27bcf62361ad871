from aws_resources.utils.exceptions import ResourceIdFormatError

RESOURCE_ID_SEPARATOR = "/"


def create_resource_id(
    part_a: str, part_b: str, separator: str = RESOURCE_ID_SEPARATOR
) -> str:
    return separator.join([part_a, part_b])


def parse_resource_id(
    resource_id: str, separator: str = RESOURCE_ID_SEPARATOR
) -> tuple[str, str]:
    """Split a two part resource id.

    The first part is optional: ``SECURITY`` and ``/SECURITY`` both parse
    to ``("", "SECURITY")``.
    """
    match resource_id.split(separator):
        case [part_b]:
            return "", part_b
        case [part_a, part_b]:
            return part_a, part_b
        case _:
            raise ResourceIdFormatError(
                f"unexpected format for ID ({resource_id}), expected PART_B or PART_A{separator}PART_B"
            )
