from aiogram.fsm.state import State, StatesGroup

class WizardFSM(StatesGroup):
    filling_field = State()  # Текстовый ввод поля (data['current_field'])
    choosing_option = State()  # Выбор варианта кнопкой: branche, status, layout, bool-поля
    uploading_photo = State()  # Загрузка профильного фото
    adding_entry = State()  # Ввод записи списка: schulbildung, berufserfahrung, sprachen
    confirm_action = State()  # Подтверждение: добавить ещё запись
    reviewing_step = State()  # Сводка шага с навигацией
