from pystorecore import create_store
from todo_reducers import todo_app

# 創建Store，初始狀態由各 reducer 的預設值組成
store = create_store(todo_app)
