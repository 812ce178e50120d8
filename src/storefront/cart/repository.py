"""Repository for the ShoppingCart aggregate."""

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def find_for_user(self, user_id) -> ShoppingCart | None:
        """Return the user's cart with its lines, or ``None`` if they never opened one."""
        carts = self._dao.query.filter(user_id=str(user_id)).all().items
        if not carts:
            return None
        return self.get(carts[0].id)

    def get_or_create_for(self, user_id) -> ShoppingCart:
        cart = self.find_for_user(user_id)
        if cart is None:
            cart = ShoppingCart.create(user_id=str(user_id))
            self.add(cart)
        return cart
