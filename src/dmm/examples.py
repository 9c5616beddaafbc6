"""
Example map builder.

Builds the reference two-key map: a space tile and a fire alarm, placed in
one grid column starting at (1, 1, 1). Matches EXAMPLE_DMM_TEXT below.
"""
from dmm.keys import Key
from dmm.literals import Number, Text
from dmm.model import DMM, Datum


EXAMPLE_DMM_TEXT = '''// Comment
"aaa" = (
/turf/open/space/basic,
/area/space),
"aab" = (
/obj/machinery/firealarm{
        dir = 8;
        name = "thing"
        }
)

(1,1,1) = {"
aaa
aab
"}
'''


def build_example_map(column_height: int = 2) -> DMM:
    """
    Build the example map.

    Args:
        column_height: Number of cells in the column; keys alternate
            space, fire alarm, space, ...
    """
    space = Key.from_str("aaa")
    alarm = Key.from_str("aab")

    dictionary = {
        space: [
            Datum("/turf/open/space/basic"),
            Datum("/area/space"),
        ],
        alarm: [
            Datum(
                "/obj/machinery/firealarm",
                {"dir": Number(8), "name": Text("thing")},
            ),
        ],
    }
    keys = [space if i % 2 == 0 else alarm for i in range(column_height)]

    return DMM(dictionary=dictionary, grid={(1, 1, 1): keys})
