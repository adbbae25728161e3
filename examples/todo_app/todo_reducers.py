from immutables import Map

from pystorecore import combine_reducers, create_reducer, on
from todo_actions import VisibilityFilters, add_todo, set_visibility_filter, toggle_todo


# ====== Handlers ======
def add_todo_handler(state, action):
    # 不修改原 tuple，返回新的 tuple
    return state + (Map({"text": action.payload["text"], "completed": False}),)


def toggle_todo_handler(state, action):
    index = action.payload["index"]
    return tuple(
        todo.set("completed", not todo["completed"]) if i == index else todo
        for i, todo in enumerate(state)
    )


def set_visibility_filter_handler(state, action):
    return action.payload["filter"]


# ====== Reducers ======
todos_reducer = create_reducer(
    (),
    on(add_todo, add_todo_handler),
    on(toggle_todo, toggle_todo_handler),
)

visibility_filter_reducer = create_reducer(
    VisibilityFilters["SHOW_ALL"],
    on(set_visibility_filter, set_visibility_filter_handler),
)

todo_app = combine_reducers({
    "visibility_filter": visibility_filter_reducer,
    "todos": todos_reducer,
})
