from mafia.views.room_handlers import (
    create_room as create_room,
)
from mafia.views.room_handlers import (
    get_room as get_room,
)
from mafia.views.room_handlers import (
    join_room as join_room,
)
from mafia.views.room_handlers import (
    my_role as my_role,
)
from mafia.views.room_handlers import (
    reset_room as reset_room,
)
from mafia.views.room_handlers import (
    room_error_handler as room_error_handler,
)
from mafia.views.room_handlers import (
    start_room as start_room,
)
