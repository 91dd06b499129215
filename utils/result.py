from typing import Generic, TypeVar, Optional, Callable, List, Union
from http import HTTPStatus

T = TypeVar('T')  # Generic type variable
U = TypeVar('U')  # Additional type variable for map operations

class Result(Generic[T]):
    """
    Outcome of a validation or processing step.

    A Result is either a success carrying data, or a failure carrying one or
    more human-readable messages. Row validation uses the list form so that
    every failing field of a row is reported; request-level failures carry a
    single message and an HTTP status.

    Attributes:
        success (bool): Indicates if the operation was successful
        data (Optional[T]): The result data (only present when success is True)
        errors (List[str]): Failure messages (empty when success is True)
        status_code (HTTPStatus): HTTP status code (default: 200 for success, 400 for failure)
    """
    def __init__(
        self,
        success: bool,
        data: Optional[T] = None,
        errors: Optional[List[str]] = None,
        status_code: Optional[Union[int, HTTPStatus]] = None
    ):
        self.success = success
        self.data = data
        self.errors = list(errors or [])

        if status_code is None:
            self.status_code = HTTPStatus.OK if success else HTTPStatus.BAD_REQUEST
        elif isinstance(status_code, HTTPStatus):
            self.status_code = status_code
        else:
            self.status_code = HTTPStatus(status_code)

    @classmethod
    def ok(cls, data: T, status_code: Optional[Union[int, HTTPStatus]] = HTTPStatus.OK) -> "Result[T]":
        """
        Create a successful Result with the provided data.

        Args:
            data (T): The data to be wrapped in the Result
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code. Defaults to 200 OK.

        Returns:
            Result[T]: A successful Result containing the provided data
        """
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(
        cls,
        error: Union[str, List[str]],
        status_code: Optional[Union[int, HTTPStatus]] = HTTPStatus.BAD_REQUEST
    ) -> "Result[T]":
        """
        Create a failed Result from one message or a list of messages.

        Args:
            error (Union[str, List[str]]): The message(s) describing the failure
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code. Defaults to 400 BAD_REQUEST.

        Returns:
            Result[T]: A failed Result containing the messages
        """
        errors = [error] if isinstance(error, str) else list(error)
        return cls(success=False, errors=errors, status_code=status_code)

    @property
    def error(self) -> Optional[str]:
        """First failure message, or None for a successful Result."""
        return self.errors[0] if self.errors else None

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        """
        Apply a function to the data if the Result is successful.

        Returns:
            Result[U]: A new Result with the transformed data or the original errors
        """
        if self.is_success():
            return Result.ok(fn(self.data), status_code=self.status_code)  # type: ignore
        return Result.fail(self.errors, status_code=self.status_code)

    def and_then(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        """
        Chain operations that return Result objects.

        If this Result is a failure it short-circuits with its own errors;
        otherwise the function is applied to the data and its Result returned.

        Args:
            fn (Callable[[T], Result[U]]): Function that takes the success data and returns a new Result

        Returns:
            Result[U]: Either the original failure or the new Result from the function
        """
        if not self.is_success():
            return Result.fail(self.errors, status_code=self.status_code)
        return fn(self.data)  # type: ignore

