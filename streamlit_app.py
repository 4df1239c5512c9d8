import datetime
import os
from typing import Optional

import streamlit as st
from pydantic import BaseModel

from catalog import NoExerciseSelected
from client import RemoteError
from codec import encode_segment, export_lines
from formats import (
    CyclingInput,
    RelaxInput,
    RepsOnlyInput,
    StrengthInput,
    TimeOnlyInput,
    TreadmillInput,
    default_input,
)
from localization import translator
from models import DayGroup, ExerciseDefinition, LogEntry, RECORD_BOTH_LABEL, Side
from reports import export_report
from settings_schema import load_settings
from store import EditSession, LogStore
from sync_service import SyncService, open_client, open_store

_ = translator.gettext

SIDE_OPTIONS = [Side.LEFT.value, Side.RIGHT.value, RECORD_BOTH_LABEL]


class RehabApp:
    """Streamlit form for the daily rehab log."""

    def __init__(self, db_path: str = "rehab.db", yaml_path: str = "settings.yaml") -> None:
        self.settings = load_settings(yaml_path).model_copy(update={"db_path": db_path})
        translator.set_language(self.settings.language)
        self._configure_page()
        self.client = open_client(self.settings)
        self._state_init()

    @property
    def store(self) -> LogStore:
        return st.session_state["store"]

    @property
    def edit_session(self) -> Optional[EditSession]:
        session = st.session_state.get("edit_session")
        if session is not None and self.store.editing_id != session.entry.id:
            st.session_state["edit_session"] = None
            return None
        return session

    def _configure_page(self) -> None:
        st.set_page_config(page_title="RehabFlow Smart", page_icon="🏸")

    def _state_init(self) -> None:
        if "store" not in st.session_state:
            st.session_state["store"] = open_store(self.settings)
        st.session_state.setdefault("edit_session", None)

    def _date(self) -> str:
        session = self.edit_session
        default = (
            datetime.date.fromisoformat(session.entry.date)
            if session
            else datetime.date.today()
        )
        key = f"log_date_{session.entry.id if session else 'new'}"
        picked = st.date_input(_("選擇日期"), value=default, key=key)
        return picked.isoformat()

    def _status_section(self, date: str) -> None:
        current = self.store.status_for(date)
        text = st.text_area(_("今日身體狀況"), value=current, key=f"status_{date}")
        if text != current:
            self.store.set_status(date, text)

    def _pick_exercise(self) -> Optional[ExerciseDefinition]:
        catalog = self.store.catalog
        if catalog.is_empty:
            st.warning(_("請先選擇動作"))
            return None
        query = st.text_input(_("搜尋動作"), key="exercise_query")
        options = [d for _cat, members in catalog.grouped(query) for d in members]
        if not options:
            return None
        session = self.edit_session
        index = 0
        if session is not None and session.definition in options:
            index = options.index(session.definition)
        return st.selectbox(
            _("選擇復健動作"),
            options,
            index=index,
            format_func=lambda d: f"{d.category} · {d.name}",
            key=f"exercise_{session.entry.id if session else 'new'}",
        )

    def _mode_fields(self, definition: ExerciseDefinition, key: str) -> BaseModel:
        session = self.edit_session
        if session is not None and session.definition.mode == definition.mode:
            seed = session.inputs
        else:
            seed = default_input(definition)
        if isinstance(seed, StrengthInput):
            cols = st.columns(3)
            return StrengthInput(
                weight=cols[0].text_input(_("負重(kg)"), seed.weight, key=f"weight_{key}"),
                reps=cols[1].text_input(_("次數"), seed.reps, key=f"reps_{key}"),
                sets=cols[2].number_input(_("總組數"), 1, value=seed.sets, key=f"sets_{key}"),
            )
        if isinstance(seed, RepsOnlyInput):
            cols = st.columns(2)
            return RepsOnlyInput(
                reps=cols[0].text_input(_("次數"), seed.reps, key=f"reps_{key}"),
                sets=cols[1].number_input(_("總組數"), 1, value=seed.sets, key=f"sets_{key}"),
            )
        if isinstance(seed, TimeOnlyInput):
            cols = st.columns(2)
            return TimeOnlyInput(
                time=cols[0].text_input(_("時間"), seed.time, key=f"time_{key}"),
                sets=cols[1].number_input(_("總組數"), 1, value=seed.sets, key=f"sets_{key}"),
            )
        if isinstance(seed, CyclingInput):
            cols = st.columns(2)
            return CyclingInput(
                resistance=cols[0].text_input(_("阻力"), seed.resistance, key=f"res_{key}"),
                time=cols[1].text_input(_("時間"), seed.time, key=f"time_{key}"),
            )
        if isinstance(seed, TreadmillInput):
            cols = st.columns(3)
            return TreadmillInput(
                slope=cols[0].text_input(_("坡度"), seed.slope, key=f"slope_{key}"),
                speed=cols[1].text_input(_("速度"), seed.speed, key=f"speed_{key}"),
                time=cols[2].text_input(_("時間"), seed.time, key=f"time_{key}"),
            )
        return RelaxInput()

    def _side(self, definition: ExerciseDefinition, key: str) -> Optional[str]:
        if not definition.is_unilateral:
            return None
        session = self.edit_session
        current = session.entry.side.value if session else Side.LEFT.value
        if current in (Side.BOTH.value, Side.NONE.value):
            current = RECORD_BOTH_LABEL
        return st.radio(
            _("執行側邊"),
            SIDE_OPTIONS,
            index=SIDE_OPTIONS.index(current),
            horizontal=True,
            key=f"side_{key}",
        )

    def _entry_form(self, date: str) -> None:
        session = self.edit_session
        st.header(_("修改") if session else f"{_('確定新增紀錄')} ({date})")
        definition = self._pick_exercise()
        if definition is None:
            return
        key = f"{definition.id}_{session.entry.id if session else 'new'}"
        side = self._side(definition, key)
        inputs = self._mode_fields(definition, key)
        notes = st.text_area(
            _("動作備註"), session.entry.notes if session else "", key=f"notes_{key}"
        )
        label = _("儲存修改") if session else _("確定新增紀錄")
        if st.button(label, key="save_entry"):
            try:
                saved = self.store.save_entry(date, definition.id, inputs, side, notes)
            except NoExerciseSelected:
                st.error(_("請先選擇動作"))
            except ValueError as e:
                st.error(f"{_('輸入有誤')}: {e}")
            else:
                st.session_state["edit_session"] = None
                st.success(encode_segment(saved))
        if session is not None and st.button(_("取消修改"), key="cancel_edit"):
            self.store.cancel_editing()
            st.session_state["edit_session"] = None
            st.rerun()

    def _start_edit(self, entry: LogEntry) -> None:
        try:
            st.session_state["edit_session"] = self.store.start_editing(entry.id)
        except NoExerciseSelected as e:
            st.error(str(e))
            return
        st.rerun()

    def _entry_row(self, entry: LogEntry) -> None:
        cols = st.columns([4, 2, 1, 1])
        side = "" if entry.side == Side.NONE else f" 【{entry.side.value}】"
        cols[0].markdown(f"**{entry.exercise_name}**{side}  \n{entry.category}")
        if entry.notes:
            cols[0].caption(f"“{entry.notes}”")
        suffix = (
            f"{entry.sets}{entry.unit}" if entry.is_duration else f"× {entry.sets} 組"
        )
        cols[1].markdown(f"{entry.value}  \n{suffix if entry.sets > 0 else ''}")
        if cols[2].button(_("修改"), key=f"edit_{entry.id}"):
            self._start_edit(entry)
        if cols[3].button(_("刪除"), key=f"delete_{entry.id}"):
            self.store.delete_entry(entry.id)
            st.rerun()

    def _day_group(self, group: DayGroup) -> None:
        with st.container(border=True):
            st.subheader(f"📅 {group.date}")
            st.caption(group.status or _("未填寫狀況"))
            for entry in group.entries:
                self._entry_row(entry)
            cols = st.columns(2)
            if self.client is not None and cols[0].button(
                _("上傳"), key=f"push_{group.date}"
            ):
                self._push_day(group.date)
            if cols[1].button(_("刪除當日"), key=f"delete_day_{group.date}"):
                self.store.delete_day(group.date)
                st.rerun()

    def _push_day(self, date: str) -> None:
        try:
            message = SyncService(self.client, self.store).push_day(date)
        except RemoteError:
            st.error(_("連線失敗"))
        else:
            st.success(message)

    def _sync_section(self) -> None:
        if self.client is None:
            return
        with st.expander(_("雲端同步")):
            if st.button(_("從雲端還原"), key="restore_history"):
                try:
                    count = SyncService(self.client, self.store).restore()
                except RemoteError:
                    st.error(_("連線失敗"))
                else:
                    st.success(f"{count}")

    def _history_section(self) -> None:
        st.header(_("歷史復健日誌"))
        groups = self.store.day_groups()
        if not groups:
            st.info(_("目前沒有紀錄"))
            return
        with st.expander(_("匯出")):
            st.code(export_lines(groups), language=None)
            st.code(export_report(groups, self.store.catalog), language=None)
        for group in groups:
            self._day_group(group)
        confirm = st.checkbox(_("清空所有數據"), key="confirm_delete_all")
        if confirm and st.button(_("清空所有數據"), key="delete_all"):
            self.store.delete_all()
            st.rerun()

    def run(self) -> None:
        st.title("RehabFlow Smart")
        date = self._date()
        self._status_section(date)
        self._entry_form(date)
        self._sync_section()
        self._history_section()


if __name__ == "__main__":
    db_path = os.environ.get("DB_PATH", "rehab.db")
    yaml_path = os.environ.get("YAML_PATH", "settings.yaml")
    RehabApp(db_path=db_path, yaml_path=yaml_path).run()
