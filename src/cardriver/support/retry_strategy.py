from cardriver.support.mixins import CommonEqualityMixin


class RetryStrategy:
    """ Decides whether a failed operation is tried again, and after what delay. """

    def next_delay(self):
        """
        Consumes one attempt from the budget.
        :return: the delay in seconds before the next attempt, or None when the budget is spent.
        """
        return 0

    def reset(self):
        pass


class FixedRetryStrategy(RetryStrategy, CommonEqualityMixin):
    """
    Retries up to max_retries times with the same delay between attempts.
    There is no jitter and no exponential backoff.
    """

    def __init__(self, max_retries, retry_delay, attempt=0):
        """
        :param max_retries: the number of retries allowed after the first failure
        :param retry_delay: the delay in seconds between attempts.
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.attempt = attempt          # retries consumed so far

    @property
    def exhausted(self):
        return self.attempt >= self.max_retries

    def next_delay(self):
        if self.exhausted:
            return None
        self.attempt += 1
        return self.retry_delay

    def reset(self):
        self.attempt = 0
