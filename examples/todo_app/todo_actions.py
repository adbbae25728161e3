from pystorecore import create_action

# ====== Action Types ======
VisibilityFilters = {
    "SHOW_ALL": "SHOW_ALL",
    "SHOW_COMPLETED": "SHOW_COMPLETED",
    "SHOW_ACTIVE": "SHOW_ACTIVE",
}

# ====== Action Creators ======
add_todo = create_action("ADD_TODO", lambda text: {"text": text})
toggle_todo = create_action("TOGGLE_TODO", lambda index: {"index": index})
set_visibility_filter = create_action("SET_VISIBILITY_FILTER", lambda f: {"filter": f})
