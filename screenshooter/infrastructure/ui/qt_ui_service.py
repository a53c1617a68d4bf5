# screenshooter/infrastructure/ui/qt_ui_service.py

import io
from typing import Any, Callable, Optional

from PIL import Image
from PySide6.QtWidgets import (
    QApplication, QFileDialog, QInputDialog, QLabel, QMessageBox, QProgressDialog
)
from PySide6.QtCore import Qt, QThread
from PySide6.QtGui import QPixmap

from screenshooter.domain.services.i_ui_service import IUIService
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import UIError


class QtUIService(IUIService):
    """Qt implementation of the presentation boundary. UI thread only."""

    def __init__(self, logger: ILoggerService):
        self.logger = logger
        self._main_thread = QApplication.instance().thread()

    def show_progress_dialog(self, title: str, on_cancel: Optional[Callable[[], None]] = None) -> QProgressDialog:
        self.logger.debug(f"Showing progress dialog: {title}")
        dialog = QProgressDialog()
        dialog.setWindowTitle(title)
        dialog.setLabelText("Status")
        dialog.setRange(0, 0)  # busy indicator
        dialog.setMinimumDuration(0)
        dialog.setAutoClose(False)
        dialog.setAutoReset(False)
        dialog.setWindowModality(Qt.ApplicationModal)
        if on_cancel is not None:
            dialog.canceled.connect(on_cancel)
        else:
            dialog.setCancelButton(None)
        dialog.show()
        return dialog

    def update_message(self, handle: QProgressDialog, text: str) -> None:
        if handle is not None:
            handle.setLabelText(text)

    def hide(self, handle: QProgressDialog) -> None:
        if handle is not None:
            handle.hide()
            handle.deleteLater()

    def show_error(self, message: str) -> Result[bool]:
        return self._message_box(QMessageBox.critical, "Error", message)

    def show_message(self, title: str, message: str) -> Result[bool]:
        return self._message_box(QMessageBox.information, title, message)

    def prompt_save_location(self, default_dir: str, default_name: str,
                             preview: Optional[Image.Image]) -> Result[Optional[str]]:
        """Save dialog with overwrite confirmation and the preview beside the file list."""
        wrong_thread = self._check_thread()
        if wrong_thread is not None:
            return wrong_thread

        try:
            chooser = QFileDialog(None, "Save screenshot as...", default_dir)
            chooser.setAcceptMode(QFileDialog.AcceptSave)
            chooser.setFileMode(QFileDialog.AnyFile)
            chooser.setNameFilter("PNG images (*.png)")
            chooser.setDefaultSuffix("png")
            # The preview widget needs Qt's own dialog, not the platform one
            chooser.setOption(QFileDialog.DontUseNativeDialog, True)
            if default_name:
                chooser.selectFile(default_name)

            if preview is not None:
                pixmap = self._to_pixmap(preview)
                if pixmap is not None:
                    label = QLabel()
                    label.setPixmap(pixmap)
                    label.setAlignment(Qt.AlignCenter)
                    layout = chooser.layout()
                    layout.addWidget(label, 0, layout.columnCount(), layout.rowCount(), 1)

            if chooser.exec() != QFileDialog.Accepted:
                return Result.ok(None)

            selected = chooser.selectedFiles()
            return Result.ok(selected[0] if selected else None)
        except Exception as e:
            error = UIError(message=f"Error showing save dialog: {e}", inner_error=e)
            self.logger.error(str(error))
            return Result.fail(error)

    def ask_for_information(self, prompt: str) -> Optional[str]:
        if self._check_thread() is not None:
            return None
        text, accepted = QInputDialog.getText(None, "Screenshot", prompt)
        return text if accepted else None

    def _message_box(self, show: Callable, title: str, message: str) -> Result[bool]:
        self.logger.debug(f"Showing message dialog: {title}")
        wrong_thread = self._check_thread()
        if wrong_thread is not None:
            return wrong_thread
        try:
            show(None, title, message)
            return Result.ok(True)
        except Exception as e:
            error = UIError(message=f"Error showing message dialog: {e}", inner_error=e)
            self.logger.error(str(error))
            return Result.fail(error)

    def _check_thread(self) -> Optional[Result[Any]]:
        if QThread.currentThread() != self._main_thread:
            error = UIError(message="UI operations must run on the main thread")
            self.logger.error(str(error))
            return Result.fail(error)
        return None

    def _to_pixmap(self, image: Image.Image) -> Optional[QPixmap]:
        """PIL Image to QPixmap through an in-memory PNG."""
        try:
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            pixmap = QPixmap()
            if not pixmap.loadFromData(buffer.getvalue()) or pixmap.isNull():
                return None
            return pixmap
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not convert preview to QPixmap: {e}")
            return None
