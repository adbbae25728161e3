import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from pystorecore import to_dict
from todo_actions import VisibilityFilters, add_todo, set_visibility_filter, toggle_todo
from todo_store import store

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    # 每次狀態改變時打印整個狀態
    unsubscribe = store.subscribe(
        lambda: print(json.dumps(to_dict(store.get_state()), ensure_ascii=False))
    )

    # 只觀察篩選條件的變化
    store.select(lambda state: state["visibility_filter"]).subscribe(
        on_next=lambda pair: print(f"篩選條件變化: {pair[0]} -> {pair[1]}")
    )

    print("\n==== 分發 actions ====")
    store.dispatch(add_todo("Learn about actions"))
    store.dispatch(add_todo("Learn about reducers"))
    store.dispatch(add_todo("Learn about store"))
    store.dispatch(toggle_todo(0))
    store.dispatch(toggle_todo(1))
    store.dispatch(set_visibility_filter(VisibilityFilters["SHOW_COMPLETED"]))

    # 停止監聽狀態更新
    unsubscribe()

    print("\n==== 最終狀態 ====")
    print(to_dict(store.state))
